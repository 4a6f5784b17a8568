"""Shared protocol definitions."""

from typing import Protocol


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard, ConsoleLogger)."""

    def log_request(self, method: str, path: str, query: str) -> None: ...
    def log_forward(
        self,
        method: str,
        upstream_url: str,
        status: int,
        size: int,
        *,
        headers: dict[str, str] | None = None,
    ) -> None: ...
    def log_target_update(self, url: str) -> None: ...
    def log_warning(self, route: str, message: str) -> None: ...
    def log_error(self, route: str, status: int, message: str) -> None: ...


class KeyValueStore(Protocol):
    """Protocol for the persistent key-value backend."""

    async def get(self, key: str) -> str | None: ...
    async def set(self, key: str, value: str) -> None: ...
