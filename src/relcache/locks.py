"""Per-key asyncio locks for serializing read-modify-write cycles."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class KeyedLock:
    """Registry handing out one asyncio.Lock per key.

    Locks are created on first use and dropped once no task holds or waits
    on them, so the registry only grows with the number of keys under
    contention at any one time. When disabled, ``hold()`` does nothing and
    concurrent read-modify-write cycles may lose updates.
    """

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        """Hold the lock for ``key`` for the duration of the block."""
        if not self.enabled:
            yield
            return

        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._waiters[key] = self._waiters.get(key, 0) + 1

        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]
