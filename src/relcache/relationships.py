"""
Relationship index: relationship name -> ordered, duplicate-free member ids.

Each relationship is one JSON list in its own namespace, so a relationship
name can never collide with a record key. Member lists are updated by
read-modify-write under a per-relationship lock.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Sequence

from relcache.backends.prefix import PrefixedStorage
from relcache.codec import decode, encode
from relcache.exceptions import MalformedValueError
from relcache.locks import KeyedLock
from relcache.logging import get_logger

logger = get_logger(__name__)


class RelationshipIndex:
    """Named member lists with set semantics over insertion order."""

    def __init__(
        self,
        storage: PrefixedStorage,
        locks: KeyedLock | None = None,
        materialize_empty: bool = False,
    ) -> None:
        """Initialize the index.

        Args:
            storage: Namespace-scoped storage holding the member lists.
            locks: Per-relationship lock registry.
            materialize_empty: When True, removing members from a missing
                relationship writes an empty one instead of leaving it absent.
        """
        self.storage = storage
        self.locks = locks if locks is not None else KeyedLock()
        self.materialize_empty = materialize_empty

    async def _load(self, to: str) -> list[str] | None:
        members = decode(to, await self.storage.get(to))
        if members is None:
            return None
        if not isinstance(members, list):
            raise MalformedValueError(
                "Relationship entry is not a list",
                context={"key": to, "raw_type": type(members).__name__},
            )
        if not all(isinstance(m, str) for m in members):
            raise MalformedValueError(
                "Relationship members must be strings",
                context={"key": to},
            )
        return members

    async def _save(self, to: str, members: list[str]) -> None:
        await self.storage.set(to, encode(to, members))

    async def get(self, to: str) -> list[str]:
        """Member ids of ``to``, or an empty list if it does not exist."""
        return await self._load(to) or []

    async def exists(self, to: str) -> bool:
        return await self.storage.has(to)

    async def contains(self, to: str, member_id: str) -> bool:
        return member_id in await self.get(to)

    async def count(self, to: str) -> int:
        return len(await self.get(to))

    async def names(self) -> list[str]:
        """Every stored relationship name, empty ones included."""
        return await self.storage.list_keys()

    async def add(self, to: str, member_id: str) -> None:
        """Add one member id; see ``add_many``."""
        await self.add_many(to, [member_id])

    async def add_many(self, to: str, member_ids: Sequence[str]) -> None:
        """Append each id not already present, creating ``to`` if needed.

        Insertion order is preserved and duplicates, including repeats within
        ``member_ids``, are ignored.

        Raises:
            TypeError: If a member id is not a string.
        """
        for member_id in member_ids:
            if not isinstance(member_id, str):
                raise TypeError(
                    f"Member ids must be strings, got {type(member_id).__name__}"
                )

        async with self.locks.hold(to):
            stored = await self._load(to)
            members = list(stored) if stored is not None else []
            seen = set(members)
            for member_id in member_ids:
                if member_id not in seen:
                    seen.add(member_id)
                    members.append(member_id)

            if stored is None or len(members) != len(stored):
                await self._save(to, members)

        logger.debug("Added to relationship", relationship=to, members=len(members))

    async def bulk_add(self, mapping: Mapping[str, Sequence[str]]) -> None:
        """Run ``add_many`` once per relationship in ``mapping``."""
        for to, member_ids in mapping.items():
            await self.add_many(to, member_ids)

    async def remove(self, to: str, member_id: str) -> None:
        """Remove one member id; see ``remove_many``."""
        await self.remove_many(to, [member_id])

    async def remove_many(self, to: str, member_ids: Sequence[str]) -> None:
        """Remove each listed id that is present.

        A missing relationship stays missing unless ``materialize_empty`` is
        set, in which case an empty one is written.
        """
        async with self.locks.hold(to):
            stored = await self._load(to)
            if stored is None:
                if self.materialize_empty:
                    await self._save(to, [])
                return

            drop = set(member_ids)
            members = [m for m in stored if m not in drop]
            if len(members) != len(stored):
                await self._save(to, members)

        logger.debug("Removed from relationship", relationship=to, members=len(members))

    async def delete(self, to: str) -> None:
        """Delete the whole relationship. Member records are untouched."""
        async with self.locks.hold(to):
            await self.storage.remove(to)

    async def delete_many(self, tos: Sequence[str]) -> None:
        for to in tos:
            await self.delete(to)

    async def clear(self) -> None:
        await self.storage.clear()
