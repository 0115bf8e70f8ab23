"""
Configuration management using pydantic-settings.

Loads configuration from environment variables and .env files.
Validates fields and provides typed access to settings.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Joins a namespace to a key inside the shared backend; never valid in a namespace
NAMESPACE_SEPARATOR = "/"


class Settings(BaseSettings):
    """Cache settings loaded from environment variables.

    Optional:
        RELCACHE_NAMESPACE: Base namespace for all cache keys in the backend
        RELCACHE_BACKEND: Storage backend to build (memory|sqlite)
        RELCACHE_SQLITE_PATH: Database file for the sqlite backend
        RELCACHE_BULK_CONCURRENCY: Maximum concurrent reads in bulk fetches
        RELCACHE_SERIALIZE_MUTATIONS: Serialize read-modify-write per key
        RELCACHE_MATERIALIZE_EMPTY_RELATIONSHIPS: Write an empty relationship
            when removing members from one that does not exist
        LOG_LEVEL: Logging level
        LOG_FILE: Optional JSON lines log file
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    RELCACHE_NAMESPACE: str = Field(
        default="relcache",
        min_length=1,
        description="Base namespace for cache keys",
    )

    RELCACHE_BACKEND: Literal["memory", "sqlite"] = Field(
        default="memory", description="Storage backend"
    )
    RELCACHE_SQLITE_PATH: Path = Field(
        default=Path(".cache/relcache.db"), description="SQLite database file"
    )

    RELCACHE_BULK_CONCURRENCY: int = Field(
        default=16, ge=1, le=256, description="Maximum concurrent reads in bulk fetches"
    )
    RELCACHE_SERIALIZE_MUTATIONS: bool = Field(
        default=True,
        description="Serialize read-modify-write cycles per key and per relationship",
    )
    RELCACHE_MATERIALIZE_EMPTY_RELATIONSHIPS: bool = Field(
        default=False,
        description="Persist an empty relationship when removing from a missing one",
    )

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    LOG_FILE: Path | None = Field(
        default=None, description="JSON lines log file (console only when unset)"
    )

    @field_validator("RELCACHE_NAMESPACE")
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        """Reject namespaces that would break key space separation."""
        if NAMESPACE_SEPARATOR in v:
            raise ValueError(
                f"RELCACHE_NAMESPACE must not contain {NAMESPACE_SEPARATOR!r}"
            )
        return v

    @property
    def records_namespace(self) -> str:
        """Namespace holding serialized records."""
        return self.RELCACHE_NAMESPACE

    @property
    def relationships_namespace(self) -> str:
        """Namespace holding relationship member lists."""
        return f"{self.RELCACHE_NAMESPACE}:relationships"

    @property
    def bulk_concurrency(self) -> int:
        """Get bulk read concurrency (lowercase alias)."""
        return self.RELCACHE_BULK_CONCURRENCY

    @property
    def serialize_mutations(self) -> bool:
        """Get mutation serialization flag (lowercase alias)."""
        return self.RELCACHE_SERIALIZE_MUTATIONS

    @property
    def materialize_empty_relationships(self) -> bool:
        """Get empty relationship materialization flag (lowercase alias)."""
        return self.RELCACHE_MATERIALIZE_EMPTY_RELATIONSHIPS

    def ensure_directories(self) -> None:
        """Create the sqlite database directory if it doesn't exist."""
        if self.RELCACHE_BACKEND == "sqlite":
            self.RELCACHE_SQLITE_PATH.parent.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If settings are invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
