"""
Async key-value cache with relationship indices.

Stores JSON records under dotted string keys, groups member ids into named
relationships, merges partial updates and scans keys by wildcard pattern,
on top of any StorageBackend.
"""

from relcache.adapter import CacheAdapter
from relcache.backends import (
    MemoryBackend,
    PrefixedStorage,
    SQLiteBackend,
    StorageBackend,
    SyncBackendAdapter,
    create_backend,
)
from relcache.config import Settings, get_settings
from relcache.exceptions import (
    BackendError,
    ConfigurationError,
    MalformedValueError,
    RelCacheError,
    SerializationError,
)
from relcache.logging import setup_logging
from relcache.types import EntryResult, PatchOutcome

__version__ = "0.1.0"

__all__ = [
    "CacheAdapter",
    "StorageBackend",
    "MemoryBackend",
    "SQLiteBackend",
    "SyncBackendAdapter",
    "PrefixedStorage",
    "create_backend",
    "Settings",
    "get_settings",
    "setup_logging",
    "RelCacheError",
    "ConfigurationError",
    "BackendError",
    "SerializationError",
    "MalformedValueError",
    "EntryResult",
    "PatchOutcome",
]
