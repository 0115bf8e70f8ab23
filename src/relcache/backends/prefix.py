"""
Namespace-scoped view over a shared storage backend.

Every key is stored as ``"{namespace}/{key}"``. Namespaces may not contain
the separator, so the prefix of one namespace can never be the prefix of
another: ``"records"`` and ``"records:relationships"`` list disjoint keys
even on the same backend.
"""

from __future__ import annotations

from typing import Any

from relcache.backends.base import StorageBackend
from relcache.config import NAMESPACE_SEPARATOR
from relcache.exceptions import ConfigurationError


class PrefixedStorage:
    """Typed facade scoping a StorageBackend to one namespace."""

    def __init__(self, backend: StorageBackend, namespace: str) -> None:
        if not namespace:
            raise ConfigurationError("Namespace must not be empty")
        if NAMESPACE_SEPARATOR in namespace:
            raise ConfigurationError(
                f"Namespace must not contain {NAMESPACE_SEPARATOR!r}",
                context={"namespace": namespace},
            )
        self.backend = backend
        self.namespace = namespace
        self._prefix = f"{namespace}{NAMESPACE_SEPARATOR}"

    def __repr__(self) -> str:
        return f"PrefixedStorage({self.namespace!r}, backend={type(self.backend).__name__})"

    def _full_key(self, key: str) -> str:
        return self._prefix + key

    async def get(self, key: str) -> Any | None:
        return await self.backend.get_item(self._full_key(key))

    async def set(self, key: str, raw: Any) -> None:
        await self.backend.set_item(self._full_key(key), raw)

    async def remove(self, key: str) -> None:
        await self.backend.remove_item(self._full_key(key))

    async def has(self, key: str) -> bool:
        return await self.backend.has_item(self._full_key(key))

    async def list_keys(self) -> list[str]:
        """Keys in this namespace, without the namespace prefix."""
        size = len(self._prefix)
        return [k[size:] for k in await self.backend.get_keys(self._prefix)]

    async def clear(self) -> None:
        """Remove every key in this namespace and nothing else."""
        await self.backend.clear(self._prefix)
