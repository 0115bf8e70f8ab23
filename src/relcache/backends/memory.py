"""In-process dict-backed storage backend."""

from __future__ import annotations

from typing import Any

from relcache.backends.base import StorageBackend


class MemoryBackend(StorageBackend):
    """Dict-backed backend. Keys enumerate in insertion order.

    Values are kept exactly as written; nothing survives the process.
    """

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    async def get_item(self, key: str) -> Any | None:
        return self._data.get(key)

    async def set_item(self, key: str, value: Any) -> None:
        self._data[key] = value

    async def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    async def has_item(self, key: str) -> bool:
        return key in self._data

    async def get_keys(self, prefix: str = "") -> list[str]:
        return [k for k in self._data if k.startswith(prefix)]

    async def clear(self, prefix: str = "") -> None:
        if not prefix:
            self._data.clear()
            return
        for key in [k for k in self._data if k.startswith(prefix)]:
            del self._data[key]
