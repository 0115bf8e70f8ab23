"""
Dotted-pattern scan over every stored record key.

Patterns and keys split on ``.``. A key matches when it has exactly as many
segments as the pattern and each segment either equals the pattern segment
or the pattern segment is ``*`` and the key segment is non-empty. There is no
index: every scan lists all record keys, so cost grows with the total key
count. Enumerate relationships instead when a collection is known up front.
"""

from __future__ import annotations

from relcache.logging import get_logger
from relcache.records import RecordStore
from relcache.types import Record

logger = get_logger(__name__)

SEGMENT_SEPARATOR = "."
WILDCARD = "*"


def parse_pattern(query: str) -> list[str]:
    """Split a scan query into segments."""
    return query.split(SEGMENT_SEPARATOR)


def matches(pattern: list[str], key: str) -> bool:
    """Check whether ``key`` matches a parsed pattern."""
    segments = key.split(SEGMENT_SEPARATOR)
    if len(segments) != len(pattern):
        return False
    for expected, actual in zip(pattern, segments):
        if expected == WILDCARD:
            if not actual:
                return False
        elif expected != actual:
            return False
    return True


class ScanEngine:
    """Runs pattern queries against a RecordStore."""

    def __init__(self, records: RecordStore) -> None:
        self.records = records

    async def scan_keys(self, query: str) -> list[str]:
        """Keys matching ``query``, in backend enumeration order."""
        pattern = parse_pattern(query)
        keys = await self.records.list_keys()
        matched = [key for key in keys if matches(pattern, key)]
        logger.debug("Scanned keys", query=query, total=len(keys), matched=len(matched))
        return matched

    async def scan(self, query: str) -> list[Record]:
        """Records whose keys match ``query``.

        Only matching keys are read. Records removed between listing and
        reading are skipped, as are malformed ones (logged by the store).
        """
        return await self.records.bulk_get(await self.scan_keys(query))
