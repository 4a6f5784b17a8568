"""Header passthrough for upstream requests and relayed responses."""

from core.request_types import HeaderList

# Recomputed by httpx for the new URL and the buffered body
TRANSPORT_HEADERS = frozenset({"host", "content-length", "transfer-encoding"})


class HeaderBuilder:
    """Copy headers between client and upstream."""

    def build_upstream_headers(self, headers: HeaderList) -> HeaderList:
        """Pass every client header through except transport framing."""
        return [(key, value) for key, value in headers if key.lower() not in TRANSPORT_HEADERS]

    def build_relay_headers(self, headers: HeaderList) -> list[tuple[bytes, bytes]]:
        """Encode upstream headers verbatim for the ASGI response, duplicates kept."""
        return [(key.lower().encode("latin-1"), value.encode("latin-1")) for key, value in headers]
