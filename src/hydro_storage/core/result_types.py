"""Ok / Err containers returned by every repository operation.

Storage failures are values: callers branch on ``is_ok()`` or ``is_err()``
instead of catching exceptions. ``Err.unwrap()`` re-raises the wrapped
:class:`~hydro_storage.core.errors.StorageError` for callers that prefer
exceptions, e.g. startup scripts and tests.
"""

from collections.abc import Callable
from typing import Generic, NoReturn, TypeVar, Union

from attrs import frozen
from beartype import beartype

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")


@frozen
class Ok(Generic[T]):
    """A successful storage operation carrying its value."""

    value: T

    @beartype
    def is_ok(self) -> bool:
        return True

    @beartype
    def is_err(self) -> bool:
        return False

    @property
    def ok_value(self) -> T:
        return self.value

    @property
    def err_value(self) -> None:
        return None

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def unwrap_err(self) -> NoReturn:
        raise ValueError(f"Expected an error, got Ok({self.value!r})")

    def map(self, fn: Callable[[T], U]) -> "Ok[U]":
        """Transform the value, e.g. ``result.map(SensorReading.to_payload)``."""
        return Ok(fn(self.value))

    def map_err(self, fn: Callable[[E], F]) -> "Ok[T]":
        return self


@frozen
class Err(Generic[E]):
    """A failed storage operation carrying its error."""

    error: E

    @beartype
    def is_ok(self) -> bool:
        return False

    @beartype
    def is_err(self) -> bool:
        return True

    @property
    def ok_value(self) -> None:
        return None

    @property
    def err_value(self) -> E:
        return self.error

    def unwrap(self) -> NoReturn:
        """Raise the wrapped error (or ValueError when it is not an exception)."""
        if isinstance(self.error, BaseException):
            raise self.error
        raise ValueError(f"Called unwrap on Err value: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_err(self) -> E:
        return self.error

    def map(self, fn: Callable[[T], U]) -> "Err[E]":
        return self

    def map_err(self, fn: Callable[[E], F]) -> "Err[F]":
        """Transform the error, leaving successes untouched."""
        return Err(fn(self.error))


# Subscript like any generic alias: Result[SensorReading, StorageError].
Result = Union[Ok[T], Err[E]]

__all__ = ["Err", "Ok", "Result"]
