"""Shared plumbing for the repositories: row mapping and error wrapping."""

import logging
from decimal import Decimal
from typing import Any, TypeVar

import asyncpg
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..core.database import Database
from ..core.errors import PersistenceError, StorageError, ValidationError
from ..core.result_types import Err

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# Failures raised by the driver once a statement is in flight.
DRIVER_ERRORS: tuple[type[BaseException], ...] = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
)


def to_numeric(value: Any) -> Any:
    """Bind floats to NUMERIC columns as exact decimals."""
    if isinstance(value, float):
        return Decimal(repr(value))
    return value


def row_to_model(model: type[M], row: asyncpg.Record) -> M:
    """Validate a database row into ``model``; a malformed row is a persistence fault."""
    try:
        return model.model_validate(dict(row.items()))
    except PydanticValidationError as e:
        raise PersistenceError(
            f"Stored {model.__name__} row failed validation", cause=e
        ) from e


def validation_error_from_pydantic(
    e: PydanticValidationError, message: str
) -> ValidationError:
    """Collapse a pydantic error into a storage ValidationError naming the field."""
    first = e.errors()[0] if e.errors() else {}
    loc = first.get("loc") or ()
    field = str(loc[0]) if loc else None
    detail = first.get("msg", str(e))
    text = f"{message}: {field} - {detail}" if field else f"{message}: {detail}"
    return ValidationError(text, field=field, cause=e)


class BaseRepository:
    """Holds the pool and turns failures into ``Err`` results."""

    def __init__(self, db: Database) -> None:
        """Initialize repository with dependency validation."""
        if not db or not hasattr(db, "acquire"):
            raise ValueError("Database pool required")
        self._db = db

    def _failure(self, operation: str, error: BaseException) -> Err[StorageError]:
        """Log ``error`` with the failing operation and wrap it for the caller."""
        if isinstance(error, ValidationError):
            logger.warning("%s rejected: %s", operation, error)
            return Err(error)
        if isinstance(error, StorageError):
            logger.error("%s failed: %s", operation, error)
            return Err(error)

        logger.error("%s failed: %s: %s", operation, type(error).__name__, error)
        return Err(PersistenceError(f"Failed to {operation.lower()}", cause=error))
