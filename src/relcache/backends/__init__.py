"""
Storage backends.

Exports:
    StorageBackend: Abstract base defining the backend interface.
    MemoryBackend: Dict-backed backend (default).
    SQLiteBackend: Persistent aiosqlite backend.
    SyncBackendAdapter: Wraps a synchronous store for async use.
    PrefixedStorage: Namespace-scoped view over any backend.
    create_backend: Build the backend named in settings.
"""

from __future__ import annotations

from relcache.backends.base import StorageBackend
from relcache.backends.memory import MemoryBackend
from relcache.backends.prefix import PrefixedStorage
from relcache.backends.sqlite import SQLiteBackend
from relcache.backends.sync import SyncBackendAdapter, SyncStorage
from relcache.config import Settings, get_settings
from relcache.exceptions import ConfigurationError


async def create_backend(settings: Settings | None = None) -> StorageBackend:
    """Build and initialize the backend selected by ``RELCACHE_BACKEND``.

    Args:
        settings: Settings to read. Defaults to the cached settings.

    Returns:
        A ready-to-use backend.

    Raises:
        ConfigurationError: If the backend name is unknown.
    """
    settings = settings or get_settings()

    if settings.RELCACHE_BACKEND == "memory":
        return MemoryBackend()

    if settings.RELCACHE_BACKEND == "sqlite":
        settings.ensure_directories()
        backend = SQLiteBackend(settings.RELCACHE_SQLITE_PATH)
        await backend.init()
        return backend

    raise ConfigurationError(
        "Unknown storage backend", context={"backend": settings.RELCACHE_BACKEND}
    )


__all__ = [
    "StorageBackend",
    "MemoryBackend",
    "SQLiteBackend",
    "SyncBackendAdapter",
    "SyncStorage",
    "PrefixedStorage",
    "create_backend",
]
