"""
Core types for the relationship cache.

This module defines the small data structures shared across the stores:
- PatchOutcome enum describing what a patch did
- EntryResult frozen dataclass for per-entry bulk read results
- Type aliases for records and batch entries
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence

# A record is any JSON-compatible value except None
Record = Any
Entry = tuple[str, Any]
Entries = Sequence[Entry]


class PatchOutcome(str, Enum):
    """Result of applying a patch to one key."""

    CREATED = "created"  # nothing stored, partial value written as a new record
    MERGED = "merged"  # top-level fields merged over the stored record
    REPLACED = "replaced"  # list value replaced the stored record wholesale
    SKIPPED = "skipped"  # update_only and nothing stored
    FAILED = "failed"  # bulk entry raised; other entries unaffected


@dataclass(frozen=True)
class EntryResult:
    """Outcome of reading one key in a bulk fetch.

    Exactly one of three states:
    - present: value is not None, error is None
    - absent: value is None, error is None
    - malformed: error is set
    """

    key: str
    value: Record | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        """True when the entry was read without error."""
        return self.error is None

    @property
    def present(self) -> bool:
        """True when the entry holds a decoded record."""
        return self.error is None and self.value is not None
