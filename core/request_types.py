"""Shared request data types."""

from dataclasses import dataclass

HeaderList = list[tuple[str, str]]


@dataclass(frozen=True)
class IncomingRequest:
    """Transport-independent view of a client request."""

    method: str
    path: str
    query: str
    headers: HeaderList
    body: bytes


@dataclass(frozen=True)
class PreparedRequest:
    """Prepared data for an upstream request."""

    method: str
    url: str
    headers: HeaderList
    body: bytes | None


@dataclass(frozen=True)
class RelayedResponse:
    """Buffered upstream response, relayed to the caller as-is."""

    status_code: int
    headers: HeaderList
    body: bytes
