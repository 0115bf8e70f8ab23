"""
Cache adapter: the capability contract exposed to a host application.

Composes the record store, merge engine, scan engine and relationship index
over one storage backend. The backend is injected once; records and
relationship entries get their own namespace on it.

Usage:
    from relcache import CacheAdapter

    async with CacheAdapter() as cache:
        await cache.set("users.1", {"name": "ada"})
        await cache.add_to_relationship("users", "1")
        users = await cache.values("users")
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Sequence

from relcache.backends.base import StorageBackend
from relcache.backends.memory import MemoryBackend
from relcache.backends.prefix import PrefixedStorage
from relcache.config import Settings, get_settings
from relcache.locks import KeyedLock
from relcache.logging import get_logger, log_context
from relcache.merge import MergeEngine
from relcache.records import RecordStore
from relcache.relationships import RelationshipIndex
from relcache.scan import ScanEngine
from relcache.types import Entries, EntryResult, PatchOutcome, Record

logger = get_logger(__name__)


class CacheAdapter:
    """Key-value cache with relationship indices over a pluggable backend.

    Not a database: there are no transactions and no atomicity across keys.
    Removing a record leaves its id in any relationship, and removing a
    relationship leaves its records in place; callers cascade themselves.
    With ``RELCACHE_SERIALIZE_MUTATIONS`` off, concurrent patches to one key
    or concurrent member updates to one relationship can lose updates.
    """

    is_async = True

    def __init__(
        self,
        backend: StorageBackend | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            backend: Storage backend to wrap. Defaults to a fresh MemoryBackend.
            settings: Settings to use. Defaults to the cached settings.
        """
        self.settings = settings or get_settings()
        self.backend = backend if backend is not None else MemoryBackend()

        serialize = self.settings.serialize_mutations
        self.records = RecordStore(
            PrefixedStorage(self.backend, self.settings.records_namespace),
            locks=KeyedLock(enabled=serialize),
            bulk_concurrency=self.settings.bulk_concurrency,
        )
        self.relationships = RelationshipIndex(
            PrefixedStorage(self.backend, self.settings.relationships_namespace),
            locks=KeyedLock(enabled=serialize),
            materialize_empty=self.settings.materialize_empty_relationships,
        )
        self.merger = MergeEngine(self.records)
        self.scanner = ScanEngine(self.records)

    async def __aenter__(self) -> CacheAdapter:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying backend."""
        await self.backend.close()

    # =========================================================================
    # Records
    # =========================================================================

    async def get(self, key: str) -> Record | None:
        """Get one record, or None if absent."""
        return await self.records.get(key)

    async def get_many(self, keys: Sequence[str]) -> list[Record]:
        """Get the present records among ``keys``; absent ones are dropped."""
        return await self.records.get_many(keys)

    async def bulk_get(self, keys: Sequence[str]) -> list[Record]:
        return await self.records.bulk_get(keys)

    async def bulk_get_results(self, keys: Sequence[str]) -> list[EntryResult]:
        """Get one EntryResult per key, exposing per-entry decode errors."""
        return await self.records.bulk_get_results(keys)

    async def set(self, key: str, value: Record) -> None:
        await self.records.set(key, value)

    async def set_many(self, entries: Entries) -> None:
        await self.records.set_many(entries)

    async def bulk_set(self, entries: Entries) -> None:
        await self.records.set_many(entries)

    async def remove(self, key: str) -> None:
        await self.records.remove(key)

    async def remove_many(self, keys: Sequence[str]) -> None:
        await self.records.remove_many(keys)

    async def bulk_remove(self, keys: Sequence[str]) -> None:
        await self.records.remove_many(keys)

    async def patch(
        self,
        key: str,
        value: Mapping[str, Any] | list[Any],
        *,
        update_only: bool = False,
    ) -> PatchOutcome:
        """Shallow-merge ``value`` into the record under ``key``."""
        return await self.merger.patch(key, value, update_only=update_only)

    async def bulk_patch(
        self,
        entries: Entries,
        *,
        update_only: bool = False,
    ) -> list[PatchOutcome]:
        return await self.merger.bulk_patch(entries, update_only=update_only)

    async def scan(self, query: str) -> list[Record]:
        """Records whose dotted keys match ``query`` (``*`` = one segment)."""
        return await self.scanner.scan(query)

    async def scan_keys(self, query: str) -> list[str]:
        """Keys matching ``query``."""
        return await self.scanner.scan_keys(query)

    async def flush(self) -> None:
        """Delete every record and every relationship. Irreversible."""
        with log_context(namespace=self.settings.RELCACHE_NAMESPACE, operation="flush"):
            await self.records.clear()
            await self.relationships.clear()
            logger.info("Cache flushed")

    # =========================================================================
    # Relationships
    # =========================================================================

    async def get_to_relationship(self, to: str) -> list[str]:
        """Member ids of relationship ``to``."""
        return await self.relationships.get(to)

    async def add_to_relationship(self, to: str, member_id: str) -> None:
        await self.relationships.add(to, member_id)

    async def add_many_to_relationship(self, to: str, member_ids: Sequence[str]) -> None:
        await self.relationships.add_many(to, member_ids)

    async def bulk_add_to_relationship(self, mapping: Mapping[str, Sequence[str]]) -> None:
        """Add member ids to several relationships at once."""
        await self.relationships.bulk_add(mapping)

    async def remove_to_relationship(self, to: str, member_id: str) -> None:
        await self.relationships.remove(to, member_id)

    async def remove_many_to_relationship(self, to: str, member_ids: Sequence[str]) -> None:
        await self.relationships.remove_many(to, member_ids)

    async def remove_relationship(self, to: str) -> None:
        await self.relationships.delete(to)

    async def remove_relationships(self, tos: Sequence[str]) -> None:
        await self.relationships.delete_many(tos)

    async def contains(self, to: str, member_id: str) -> bool:
        return await self.relationships.contains(to, member_id)

    async def count(self, to: str) -> int:
        """Number of member ids in ``to``, whether or not their records exist."""
        return await self.relationships.count(to)

    async def keys(self, to: str) -> list[str]:
        """Record keys ``"{to}.{id}"`` for every member of ``to``.

        Keys are not checked against the record store.
        """
        return [f"{to}.{member_id}" for member_id in await self.relationships.get(to)]

    async def values(self, to: str) -> list[Record]:
        """Records of every member of ``to`` that has one stored."""
        return await self.records.get_many(await self.keys(to))
