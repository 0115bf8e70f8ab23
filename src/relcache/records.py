"""
Record store: CRUD and bulk CRUD over serialized records.

Records are encoded with the codec and written through a PrefixedStorage.
Bulk reads fan out concurrently under a semaphore; a record that fails to
decode fails only its own entry.
"""

from __future__ import annotations

import asyncio
from contextlib import AbstractAsyncContextManager
from typing import Sequence

from relcache.backends.prefix import PrefixedStorage
from relcache.codec import decode, encode
from relcache.exceptions import MalformedValueError
from relcache.locks import KeyedLock
from relcache.logging import get_logger
from relcache.types import Entries, EntryResult, Record

logger = get_logger(__name__)


class RecordStore:
    """Key-value store of JSON records in one namespace.

    Writes for a key are serialized through the key lock registry, which
    MergeEngine shares to make patch's read-then-write atomic within the
    process.
    """

    def __init__(
        self,
        storage: PrefixedStorage,
        locks: KeyedLock | None = None,
        bulk_concurrency: int = 16,
    ) -> None:
        """Initialize the record store.

        Args:
            storage: Namespace-scoped storage holding the records.
            locks: Per-key lock registry. Defaults to an enabled registry.
            bulk_concurrency: Maximum concurrent reads in bulk fetches.
        """
        self.storage = storage
        self.locks = locks if locks is not None else KeyedLock()
        self.bulk_concurrency = bulk_concurrency

    def lock(self, key: str) -> AbstractAsyncContextManager[None]:
        """Hold the write lock for ``key``."""
        return self.locks.hold(key)

    async def get(self, key: str) -> Record | None:
        """Get one record.

        Returns:
            The decoded record, or None if the key is absent.

        Raises:
            MalformedValueError: If the stored value cannot be decoded.
        """
        return decode(key, await self.storage.get(key))

    async def has(self, key: str) -> bool:
        return await self.storage.has(key)

    async def _read_entry(self, key: str, semaphore: asyncio.Semaphore) -> EntryResult:
        async with semaphore:
            raw = await self.storage.get(key)
        try:
            return EntryResult(key=key, value=decode(key, raw))
        except MalformedValueError as e:
            return EntryResult(key=key, error=e)

    async def bulk_get_results(self, keys: Sequence[str]) -> list[EntryResult]:
        """Fetch many keys concurrently, one result per key.

        Results line up with ``keys``. Absent keys give an empty result and
        undecodable values give a result carrying the MalformedValueError.

        Raises:
            BackendError: If the backend fails for any key. Raised after
                every fetch has finished.
        """
        if not keys:
            return []

        semaphore = asyncio.Semaphore(self.bulk_concurrency)
        results = await asyncio.gather(
            *[self._read_entry(key, semaphore) for key in keys],
            return_exceptions=True,
        )

        for result in results:
            if isinstance(result, BaseException):
                raise result

        return list(results)

    async def bulk_get(self, keys: Sequence[str]) -> list[Record]:
        """Fetch many keys concurrently, keeping only present records.

        Order follows ``keys`` but positions do not line up with it: absent
        and malformed entries are dropped. Malformed entries are logged.
        """
        records: list[Record] = []
        for result in await self.bulk_get_results(keys):
            if result.error is not None:
                logger.warning(
                    "Skipping malformed record",
                    key=result.key,
                    error=str(result.error),
                )
            elif result.value is not None:
                records.append(result.value)
        return records

    async def get_many(self, keys: Sequence[str]) -> list[Record]:
        """Batch form of ``get``; same filtering as ``bulk_get``."""
        return await self.bulk_get(keys)

    async def write_unlocked(self, key: str, value: Record) -> None:
        """Encode and write a record. The caller must hold the key lock."""
        await self.storage.set(key, encode(key, value))

    async def set(self, key: str, value: Record) -> None:
        """Replace the record under ``key``.

        Raises:
            SerializationError: If the value cannot be encoded. Nothing is
                written in that case.
        """
        raw = encode(key, value)
        async with self.lock(key):
            await self.storage.set(key, raw)
        logger.debug("Set record", key=key)

    async def set_many(self, entries: Entries) -> None:
        """Replace records for each ``(key, value)`` pair in order."""
        for key, value in entries:
            await self.set(key, value)

    async def remove(self, key: str) -> None:
        """Delete one record. Absent keys are ignored."""
        async with self.lock(key):
            await self.storage.remove(key)
        logger.debug("Removed record", key=key)

    async def remove_many(self, keys: Sequence[str]) -> None:
        for key in keys:
            await self.remove(key)

    async def list_keys(self) -> list[str]:
        """Every record key, in backend enumeration order."""
        return await self.storage.list_keys()

    async def clear(self) -> None:
        await self.storage.clear()
