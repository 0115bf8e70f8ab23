"""
Pytest configuration and fixtures for cache tests.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import AsyncGenerator, Generator
from unittest.mock import patch

import pytest

from relcache.adapter import CacheAdapter
from relcache.backends.memory import MemoryBackend
from relcache.backends.prefix import PrefixedStorage
from relcache.config import Settings, clear_settings_cache
from relcache.records import RecordStore


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test outputs."""
    return tmp_path


@pytest.fixture
def mock_env_vars(temp_dir: Path) -> Generator[dict[str, str], None, None]:
    """Provide mock environment variables for testing."""
    env_vars = {
        "RELCACHE_NAMESPACE": "testcache",
        "RELCACHE_BACKEND": "memory",
        "RELCACHE_SQLITE_PATH": str(temp_dir / "db" / "cache.db"),
        "RELCACHE_BULK_CONCURRENCY": "4",
        "RELCACHE_SERIALIZE_MUTATIONS": "true",
        "RELCACHE_MATERIALIZE_EMPTY_RELATIONSHIPS": "false",
        "LOG_LEVEL": "DEBUG",
    }

    with patch.dict(os.environ, env_vars, clear=False):
        clear_settings_cache()
        yield env_vars


@pytest.fixture
def settings() -> Settings:
    """Provide default settings isolated from the environment and .env."""
    with patch.dict(os.environ, {}, clear=True):
        return Settings(_env_file=None)


@pytest.fixture
def backend() -> MemoryBackend:
    """Provide an empty in-memory backend."""
    return MemoryBackend()


@pytest.fixture
def record_store(backend: MemoryBackend) -> RecordStore:
    """Provide a record store over the in-memory backend."""
    return RecordStore(PrefixedStorage(backend, "records"), bulk_concurrency=4)


@pytest.fixture
async def cache(backend: MemoryBackend, settings: Settings) -> AsyncGenerator[CacheAdapter, None]:
    """Provide a cache adapter over the in-memory backend."""
    adapter = CacheAdapter(backend, settings)
    yield adapter
    await adapter.close()


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Automatically reset settings cache before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
