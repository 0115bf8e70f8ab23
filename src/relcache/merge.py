"""
Merge engine: partial updates (patch) over the record store.

A patch reads the stored record, then writes either the incoming list
wholesale or the shallow merge of the incoming mapping over the stored one.
Nested values are replaced, never merged. The read and the write happen
under the key lock so concurrent patches and sets in this process cannot
interleave between them.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from relcache.exceptions import MalformedValueError, SerializationError
from relcache.logging import get_logger
from relcache.records import RecordStore
from relcache.types import Entries, PatchOutcome

logger = get_logger(__name__)


class MergeEngine:
    """Applies patch semantics on top of a RecordStore."""

    def __init__(self, records: RecordStore) -> None:
        self.records = records

    async def patch(
        self,
        key: str,
        value: Mapping[str, Any] | list[Any] | tuple[Any, ...],
        *,
        update_only: bool = False,
    ) -> PatchOutcome:
        """Merge ``value`` into the record under ``key``.

        Args:
            key: Record key.
            value: Mapping to merge, or list that replaces the record.
            update_only: When True, do nothing if no record is stored.

        Returns:
            What the patch did.

        Raises:
            TypeError: If ``value`` is neither a mapping nor a list.
            MalformedValueError: If the stored record cannot be decoded.
            SerializationError: If the merged record cannot be encoded.
        """
        if not isinstance(value, (Mapping, list, tuple)):
            raise TypeError(
                f"patch value must be a mapping or a list, got {type(value).__name__}"
            )

        async with self.records.lock(key):
            old = await self.records.get(key)

            if update_only and old is None:
                logger.debug("Patch skipped, no record", key=key)
                return PatchOutcome.SKIPPED

            if isinstance(value, (list, tuple)):
                new: Any = list(value)
                outcome = PatchOutcome.REPLACED
            else:
                # Stored scalars and lists have no fields to keep
                base = old if isinstance(old, Mapping) else {}
                new = {**base, **value}
                outcome = PatchOutcome.CREATED if old is None else PatchOutcome.MERGED

            await self.records.write_unlocked(key, new)

        logger.debug("Patched record", key=key, outcome=outcome.value)
        return outcome

    async def bulk_patch(
        self,
        entries: Entries,
        *,
        update_only: bool = False,
    ) -> list[PatchOutcome]:
        """Patch each ``(key, value)`` pair independently.

        An entry that fails on its own data (bad value type, malformed stored
        record, unencodable result) is logged and reported as FAILED; the
        remaining entries still run. Backend failures propagate.

        Returns:
            One outcome per entry, in input order.
        """
        outcomes: list[PatchOutcome] = []
        for key, value in entries:
            try:
                outcomes.append(await self.patch(key, value, update_only=update_only))
            except (TypeError, MalformedValueError, SerializationError) as e:
                logger.warning("Patch entry failed", key=key, error=str(e))
                outcomes.append(PatchOutcome.FAILED)
        return outcomes
