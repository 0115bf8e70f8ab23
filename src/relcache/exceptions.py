"""
Custom exception hierarchy for the relationship cache.

All exceptions inherit from RelCacheError, which provides optional context
for structured error handling and logging.
"""

from __future__ import annotations

from typing import Any


class RelCacheError(Exception):
    """Base exception for all cache errors.

    Attributes:
        message: Human-readable error message.
        context: Optional structured context for logging/debugging.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class ConfigurationError(RelCacheError):
    """Raised when configuration is invalid.

    Examples:
        - Namespace containing the key separator
        - Unknown backend name
    """

    pass


class BackendError(RelCacheError):
    """Raised when the storage backend fails.

    Context should include:
        - backend: The backend class name
        - operation: The backend operation that failed
        - key: The key involved, if any
    """

    pass


class SerializationError(RelCacheError):
    """Raised when a value cannot be encoded for storage.

    Context should include:
        - key: The key being written
        - value_type: Type name of the offending value
    """

    pass


class MalformedValueError(RelCacheError):
    """Raised when a stored value cannot be decoded.

    Context should include:
        - key: The key whose stored value is malformed
        - raw_type: Type name of the raw stored value
    """

    @property
    def key(self) -> str | None:
        """Key of the malformed entry, if known."""
        return self.context.get("key")
