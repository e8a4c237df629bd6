"""Error taxonomy for the storage layer.

Every error carries the underlying exception (when there is one) both as
``__cause__`` (set by ``raise ... from``) and as ``.cause`` so that errors
returned inside ``Err`` containers, which are never raised, still expose it.
"""

from __future__ import annotations


class StorageError(Exception):
    """Base class for every failure surfaced by the storage layer."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class ConfigurationError(StorageError):
    """Missing or invalid configuration (fatal at startup)."""


class StorageConnectionError(StorageError):
    """A connection could not be established or acquired from the pool."""


class ConnectionTimeout(StorageConnectionError):
    """No pooled connection became available within the connect timeout."""


class PoolClosed(StorageConnectionError):
    """The pool was closed, or never opened, when a connection was requested."""


class ValidationError(StorageError):
    """A caller-supplied value violates a documented range or shape."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        minimum: float | None = None,
        maximum: float | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.field = field
        self.minimum = minimum
        self.maximum = maximum


class NotFoundError(StorageError):
    """A singleton record that must exist is absent (integrity violation)."""


class PersistenceError(StorageError):
    """The database rejected or failed a statement."""


__all__ = [
    "ConfigurationError",
    "ConnectionTimeout",
    "NotFoundError",
    "PersistenceError",
    "PoolClosed",
    "StorageConnectionError",
    "StorageError",
    "ValidationError",
]
