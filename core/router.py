"""Path rewriting and upstream URL resolution."""

from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode

import httpx

from core.exceptions import InvalidTargetUrl, UrlConstructionError


@dataclass(frozen=True)
class RewrittenPath:
    """Result of rewriting an incoming proxy path."""

    normalized_path: str
    relative_path: str
    query: str

    @property
    def reference(self) -> str:
        """Relative reference to resolve against the base URL."""
        if self.query:
            return f"{self.relative_path}?{self.query}"
        return self.relative_path


# Schemes that are only valid with an authority part
HOST_REQUIRED_SCHEMES = frozenset({"http", "https", "ws", "wss", "ftp"})


def _has_segment_prefix(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix.rstrip("/") + "/")


def validate_target_url(value: str | None) -> str:
    """Return value unchanged if it is an absolute URL, else raise."""
    if not value:
        raise InvalidTargetUrl("Invalid URL, please check the format.")
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL as e:
        raise InvalidTargetUrl("Invalid URL, please check the format.") from e
    if not url.scheme or (url.scheme in HOST_REQUIRED_SCHEMES and not url.host):
        raise InvalidTargetUrl("Invalid URL, please check the format.")
    return value


class PathRewriter:
    """Map incoming request paths onto the stored upstream base URL."""

    def __init__(
        self,
        prefix: str = "/proxy",
        aliases: dict[str, str] | None = None,
        reserved_query_key: str = "key",
    ) -> None:
        self.prefix = prefix.rstrip("/") or "/"
        self.aliases = aliases or {}
        self.reserved_query_key = reserved_query_key

    def normalize(self, path: str) -> str:
        """Apply alias prefix substitutions; other paths come back unchanged."""
        for alias, canonical in self.aliases.items():
            if _has_segment_prefix(path, alias):
                path = canonical + path[len(alias):]
        return path

    def is_proxy_path(self, path: str) -> bool:
        return _has_segment_prefix(self.normalize(path), self.prefix)

    def filter_query(self, query: str) -> str:
        """Drop the reserved key and collapse duplicates to their last value."""
        params: dict[str, str] = {}
        for key, value in parse_qsl(query, keep_blank_values=True):
            if key != self.reserved_query_key:
                params[key] = value
        return urlencode(params)

    def rewrite(self, path: str, query: str = "") -> RewrittenPath:
        """Rewrite a proxy path into the relative reference for the upstream."""
        normalized = self.normalize(path)
        if not _has_segment_prefix(normalized, self.prefix):
            raise ValueError(f"Not a proxy path: {path}")
        return RewrittenPath(
            normalized_path=normalized,
            relative_path=normalized[len(self.prefix):],
            query=self.filter_query(query),
        )

    def resolve(self, base_url: str, rewritten: RewrittenPath) -> str:
        """Resolve the rewritten reference against the base URL (RFC 3986)."""
        try:
            return str(httpx.URL(base_url).join(rewritten.reference))
        except (httpx.InvalidURL, ValueError) as e:
            raise UrlConstructionError("Error constructing target URL.") from e
