"""
Tests for configuration module.
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from relcache.config import Settings, clear_settings_cache, get_settings


class TestSettingsValidation:
    """Tests for Settings validation."""

    def test_settings_loads_from_env(self, mock_env_vars: dict[str, str]) -> None:
        """Test that settings correctly loads from environment variables."""
        settings = get_settings()

        assert settings.RELCACHE_NAMESPACE == "testcache"
        assert settings.RELCACHE_BACKEND == "memory"
        assert settings.RELCACHE_BULK_CONCURRENCY == 4
        assert settings.RELCACHE_SERIALIZE_MUTATIONS is True
        assert settings.RELCACHE_MATERIALIZE_EMPTY_RELATIONSHIPS is False
        assert settings.LOG_LEVEL == "DEBUG"

    def test_namespace_with_separator_rejected(self) -> None:
        """Test that a namespace containing '/' is rejected."""
        with patch.dict(os.environ, {"RELCACHE_NAMESPACE": "a/b"}, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings(_env_file=None)

        assert "RELCACHE_NAMESPACE" in str(exc_info.value)

    def test_empty_namespace_rejected(self) -> None:
        """Test that an empty namespace is rejected."""
        with patch.dict(os.environ, {"RELCACHE_NAMESPACE": ""}, clear=True):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    def test_unknown_backend_rejected(self) -> None:
        """Test that only known backends are accepted."""
        with patch.dict(os.environ, {"RELCACHE_BACKEND": "redis"}, clear=True):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    def test_bulk_concurrency_bounds(self) -> None:
        """Test that bulk concurrency must be at least 1."""
        with patch.dict(os.environ, {"RELCACHE_BULK_CONCURRENCY": "0"}, clear=True):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)


class TestSettingsDefaults:
    """Tests for Settings default values."""

    def test_defaults(self, settings: Settings) -> None:
        """Test default values without any environment."""
        assert settings.RELCACHE_NAMESPACE == "relcache"
        assert settings.RELCACHE_BACKEND == "memory"
        assert settings.RELCACHE_SQLITE_PATH == Path(".cache/relcache.db")
        assert settings.bulk_concurrency == 16
        assert settings.serialize_mutations is True
        assert settings.materialize_empty_relationships is False

    def test_derived_namespaces(self, settings: Settings) -> None:
        """Test that record and relationship namespaces are derived."""
        assert settings.records_namespace == "relcache"
        assert settings.relationships_namespace == "relcache:relationships"


class TestSettingsMethods:
    """Tests for Settings methods."""

    def test_ensure_directories_creates_sqlite_dir(self, temp_dir: Path) -> None:
        """Test that ensure_directories creates the database directory."""
        db_path = temp_dir / "nested" / "cache.db"
        settings = Settings(
            _env_file=None, RELCACHE_BACKEND="sqlite", RELCACHE_SQLITE_PATH=db_path
        )

        settings.ensure_directories()

        assert db_path.parent.exists()

    def test_get_settings_is_cached(self, mock_env_vars: dict[str, str]) -> None:
        """Test that get_settings returns the same instance until cleared."""
        first = get_settings()
        assert get_settings() is first

        clear_settings_cache()
        assert get_settings() is not first
