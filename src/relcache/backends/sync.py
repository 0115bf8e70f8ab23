"""Adapter exposing a synchronous key-value store as a StorageBackend."""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

from relcache.backends.base import StorageBackend


class SyncStorage(Protocol):
    """Blocking counterpart of StorageBackend."""

    def get_item(self, key: str) -> Any | None: ...

    def set_item(self, key: str, value: Any) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def has_item(self, key: str) -> bool: ...

    def get_keys(self, prefix: str = "") -> list[str]: ...

    def clear(self, prefix: str = "") -> None: ...


class SyncBackendAdapter(StorageBackend):
    """Run each call of a synchronous store in a worker thread.

    Calls are forwarded one at a time through ``asyncio.to_thread``, so a
    blocking store never stalls the event loop. Thread safety of the
    wrapped store is its own concern.
    """

    def __init__(self, storage: SyncStorage) -> None:
        self._storage = storage

    async def get_item(self, key: str) -> Any | None:
        return await asyncio.to_thread(self._storage.get_item, key)

    async def set_item(self, key: str, value: Any) -> None:
        await asyncio.to_thread(self._storage.set_item, key, value)

    async def remove_item(self, key: str) -> None:
        await asyncio.to_thread(self._storage.remove_item, key)

    async def has_item(self, key: str) -> bool:
        return await asyncio.to_thread(self._storage.has_item, key)

    async def get_keys(self, prefix: str = "") -> list[str]:
        return await asyncio.to_thread(self._storage.get_keys, prefix)

    async def clear(self, prefix: str = "") -> None:
        await asyncio.to_thread(self._storage.clear, prefix)

    async def close(self) -> None:
        close = getattr(self._storage, "close", None)
        if close is not None:
            await asyncio.to_thread(close)
