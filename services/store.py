"""Key-value backends for persisted proxy state."""

import asyncio
import json
import os
import tempfile
from pathlib import Path

from core.config import StoreSettings
from core.protocols import KeyValueStore


class MemoryStore:
    """Process-local store; state is lost on restart."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore:
    """Store persisted as a single JSON object on disk.

    Writes go through a temp file and ``os.replace`` so a concurrent reader
    sees either the old or the new document, never a partial one. There is no
    locking: concurrent writers race and the last one wins.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    async def get(self, key: str) -> str | None:
        data = await asyncio.to_thread(self._read)
        value = data.get(key)
        return value if isinstance(value, str) else None

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write_key, key, value)

    def _read(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            return {}
        return data if isinstance(data, dict) else {}

    def _write_key(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".store-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise


def create_store(settings: StoreSettings) -> KeyValueStore:
    """Build the backend selected in config."""
    if settings.backend == "memory":
        return MemoryStore()
    return JsonFileStore(Path(settings.path).expanduser())
