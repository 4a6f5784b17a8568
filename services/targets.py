"""Target URL storage on top of a key-value backend."""

from core.protocols import KeyValueStore
from core.router import validate_target_url

TARGET_KEY = "targetUrl"


class TargetStore:
    """Single-key register holding the upstream base URL."""

    def __init__(self, store: KeyValueStore, key: str = TARGET_KEY) -> None:
        self._store = store
        self._key = key

    async def get_target(self) -> str | None:
        """Return the stored base URL, or None before the first set."""
        value = await self._store.get(self._key)
        return value or None

    async def set_target(self, url: str) -> str:
        """Validate and store url verbatim; raises InvalidTargetUrl."""
        url = validate_target_url(url)
        await self._store.set(self._key, url)
        return url

    async def seed_default(self, default_url: str | None) -> bool:
        """Store default_url only when nothing is stored yet."""
        if not default_url or await self.get_target() is not None:
            return False
        await self.set_target(default_url)
        return True
