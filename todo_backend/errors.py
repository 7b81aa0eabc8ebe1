"""Error types shared by the models, storage backends and HTTP layer."""

from __future__ import annotations


class TodoBackendError(Exception):
    """Base class for errors raised by the todo backend."""


class DecodeError(TodoBackendError, ValueError):
    """Raised when a request body cannot be decoded into a todo."""


class BackendUnavailable(TodoBackendError):
    """Raised when the storage backend cannot be reached or fails."""

    def __init__(self, message: str = "Storage backend unavailable", *, backend: str = "unknown"):
        super().__init__(message)
        self.backend = backend


class ConfigError(TodoBackendError):
    """Raised when environment configuration is invalid."""
