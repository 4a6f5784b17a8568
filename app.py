"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from api.handlers import handle_request
from core.config import Config
from core.exceptions import ProxyError
from core.headers import HeaderBuilder
from core.protocols import KeyValueStore, RequestLogger
from core.router import PathRewriter
from core.transform import RequestTransformer
from services.routing_service import RoutingService
from services.store import create_store
from services.targets import TargetStore
from services.upstream import UpstreamClient

METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(
    config: Config,
    logger: RequestLogger,
    store: KeyValueStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    targets = TargetStore(store if store is not None else create_store(config.store))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(
            max_connections=config.upstream.max_connections,
            max_keepalive_connections=config.upstream.max_keepalive_connections,
        )
        client = httpx.AsyncClient(
            timeout=config.upstream.timeout,
            limits=limits,
            follow_redirects=config.upstream.follow_redirects,
            transport=transport,
        )
        if await targets.seed_default(config.target.default_url):
            logger.log_target_update(config.target.default_url)

        header_builder = HeaderBuilder()
        app.state.header_builder = header_builder
        app.state.upstream_client = UpstreamClient(client)
        app.state.routing_service = RoutingService(
            targets=targets,
            rewriter=PathRewriter(
                prefix=config.proxy.prefix,
                aliases=config.proxy.aliases,
                reserved_query_key=config.proxy.reserved_query_key,
            ),
            transformer=RequestTransformer(
                logger,
                enabled=config.transform.enabled,
                default_model=config.transform.default_model,
                default_max_tokens=config.transform.default_max_tokens,
            ),
            header_builder=header_builder,
            control_key=config.proxy.control_key,
        )
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(
        title="Dynamic Proxy",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.exception_handler(ProxyError)
    async def proxy_error_handler(request: Request, exc: ProxyError):
        logger.log_error(request.url.path, exc.status_code, exc.message)
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.api_route("/{path:path}", methods=METHODS)
    async def proxy_any(request: Request):
        return await handle_request(request, config, logger)

    return app
