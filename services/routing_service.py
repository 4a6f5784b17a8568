"""Routing orchestration for proxy requests."""

from core.exceptions import ConfigurationMissing
from core.headers import HeaderBuilder
from core.request_types import IncomingRequest, PreparedRequest
from core.router import PathRewriter
from core.transform import RequestTransformer
from services.targets import TargetStore


class RoutingService:
    """Prepare client requests for forwarding to the stored target."""

    def __init__(
        self,
        targets: TargetStore,
        rewriter: PathRewriter,
        transformer: RequestTransformer,
        header_builder: HeaderBuilder,
        control_key: str = "setUrl",
    ) -> None:
        self._targets = targets
        self._rewriter = rewriter
        self._transformer = transformer
        self._headers = header_builder
        self.control_key = control_key

    @property
    def targets(self) -> TargetStore:
        return self._targets

    def is_proxy_path(self, path: str) -> bool:
        return self._rewriter.is_proxy_path(path)

    async def prepare(self, request: IncomingRequest) -> PreparedRequest:
        """Resolve the upstream URL and outbound body for a proxy request."""
        base_url = await self._targets.get_target()
        if base_url is None:
            raise ConfigurationMissing(
                f"Proxy target URL is not set. Use ?{self.control_key}=<your target URL> to set it."
            )

        rewritten = self._rewriter.rewrite(request.path, request.query)
        url = self._rewriter.resolve(base_url, rewritten)

        body = await self._transformer.transform(request.body, _content_type(request))
        return PreparedRequest(
            method=request.method,
            url=url,
            headers=self._headers.build_upstream_headers(request.headers),
            body=body or None,
        )


def _content_type(request: IncomingRequest) -> str | None:
    for key, value in request.headers:
        if key.lower() == "content-type":
            return value
    return None
