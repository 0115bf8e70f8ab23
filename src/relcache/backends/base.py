"""
Base class for storage backends.

A backend is a flat async key-value store. The cache never talks to it
directly; it goes through PrefixedStorage, which scopes every key under a
namespace so several key spaces can share one backend.

Backends must support:
- get/set/remove/has on single keys
- listing and clearing keys by prefix
- removal of an absent key as a no-op
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class StorageBackend(ABC):
    """Abstract interface for storage backends."""

    @abstractmethod
    async def get_item(self, key: str) -> Any | None:
        """Get a raw value, or None if the key is absent."""
        ...

    @abstractmethod
    async def set_item(self, key: str, value: Any) -> None:
        """Store a raw value, replacing any existing one."""
        ...

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        """Remove a key. Removing an absent key is a no-op."""
        ...

    @abstractmethod
    async def has_item(self, key: str) -> bool:
        """Check if a key exists."""
        ...

    @abstractmethod
    async def get_keys(self, prefix: str = "") -> list[str]:
        """List keys starting with ``prefix`` in enumeration order."""
        ...

    @abstractmethod
    async def clear(self, prefix: str = "") -> None:
        """Remove every key starting with ``prefix``."""
        ...

    async def close(self) -> None:
        """Release any resources held by the backend."""
        return None
