"""FastAPI route handlers."""

from fastapi import Request, Response
from fastapi.responses import PlainTextResponse

from core.config import Config
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import IncomingRequest


def _raw_path(request: Request) -> str:
    """Path as sent by the client, percent-encoding intact."""
    raw_path = request.scope.get("raw_path")
    if raw_path:
        return raw_path.split(b"?", 1)[0].decode("latin-1")
    return request.url.path


async def _read_incoming(request: Request) -> IncomingRequest:
    """Buffer the client request."""
    body = await request.body()
    return IncomingRequest(
        method=request.method,
        path=_raw_path(request),
        query=request.url.query,
        headers=[(key.decode("latin-1"), value.decode("latin-1")) for key, value in request.headers.raw],
        body=body,
    )


async def handle_request(request: Request, config: Config, logger: RequestLogger) -> Response:
    """Dispatch: control key first, then proxy prefix, then fallback."""
    path = _raw_path(request)
    logger.log_request(request.method, path, request.url.query)

    if config.proxy.control_key in request.query_params:
        return await handle_set_url(request, config, logger)

    if request.app.state.routing_service.is_proxy_path(path):
        return await handle_proxy(request, logger)

    return await handle_fallback(request, config)


async def handle_set_url(request: Request, config: Config, logger: RequestLogger) -> Response:
    """Store a new target URL from the control query parameter."""
    new_url = request.query_params.getlist(config.proxy.control_key)[0]
    targets = request.app.state.routing_service.targets
    stored = await targets.set_target(new_url)
    logger.log_target_update(stored)
    return PlainTextResponse(f"Proxy target URL updated to: {stored}")


async def handle_proxy(request: Request, logger: RequestLogger) -> Response:
    """Forward the request to the stored target and relay the response."""
    incoming = await _read_incoming(request)

    routing_service = request.app.state.routing_service
    prepared = await routing_service.prepare(incoming)
    upstream = request.app.state.upstream_client
    relayed = await upstream.forward(prepared)

    header_builder: HeaderBuilder = request.app.state.header_builder
    logger.log_forward(
        prepared.method,
        prepared.url,
        relayed.status_code,
        len(relayed.body),
        headers=dict(prepared.headers),
    )

    response = Response(content=relayed.body, status_code=relayed.status_code)
    response.raw_headers = header_builder.build_relay_headers(relayed.headers)
    return response


async def handle_fallback(request: Request, config: Config) -> Response:
    """Return usage text, with the current target when one is set."""
    prefix = config.proxy.prefix
    control_key = config.proxy.control_key
    lines = [
        "Welcome to the dynamic proxy:",
        f"1. Send requests to paths starting with {prefix} to have them forwarded.",
        f"2. Use ?{control_key}=<your target URL> to set the proxy target.",
    ]
    target = await request.app.state.routing_service.targets.get_target()
    if target:
        lines.append(f"Current target: {target}")
    return PlainTextResponse("\n".join(lines))
