"""HTTP forwarding to the upstream target."""

import httpx

from core.exceptions import UpstreamTransportError
from core.request_types import PreparedRequest, RelayedResponse


class UpstreamClient:
    """Send prepared requests upstream and buffer the raw response."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def forward(self, prepared: PreparedRequest) -> RelayedResponse:
        """Issue the request once; transport failures become UpstreamTransportError."""
        req = self._client.build_request(
            prepared.method,
            prepared.url,
            headers=[(key.encode("latin-1"), value.encode("latin-1")) for key, value in prepared.headers],
            content=prepared.body,
        )
        try:
            response = await self._client.send(req, stream=True)
            try:
                # Raw bytes keep content-encoding and content-length consistent
                body = b"".join([chunk async for chunk in response.aiter_raw()])
            finally:
                await response.aclose()
        except httpx.RequestError as e:
            detail = str(e) or type(e).__name__
            raise UpstreamTransportError(f"Error requesting target URL: {detail}") from e

        return RelayedResponse(
            status_code=response.status_code,
            headers=[(key.decode("latin-1"), value.decode("latin-1")) for key, value in response.headers.raw],
            body=body,
        )
