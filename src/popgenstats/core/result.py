"""
Result type for statistics that can fail.

Every public statistic returns ``Ok(value)`` or ``Err(StatError)`` instead
of raising, so a batch over many loci or group pairs can skip the failing
ones and keep the rest.

Usage:
    >>> result = allele_frequencies(container, 0, [1, 2])
    >>> if result.is_ok():
    ...     freqs = result.unwrap()
    >>> else:
    ...     error = result.unwrap_err()
    ...     print(error.kind, error.message)

Statistics built on other statistics compose through ``unwrap()``: on an
``Err`` it raises ``StatisticError`` carrying the original ``StatError``,
and the ``returns_result`` decorator turns that back into an ``Err`` at the
outer boundary, so the error kind survives any depth of composition.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from functools import wraps
from typing import TypeVar, Generic, Callable, Union, Any, List

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type
U = TypeVar("U")  # Transformed type


class ErrorKind(Enum):
    """Failure categories a statistic can report."""
    BOUNDS = "bounds"
    ZERO_DIVISION = "zero_division"
    INVALID_ARGUMENT = "invalid_argument"
    DOMAIN = "domain"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class StatError:
    """Why a statistic could not be computed."""

    kind: ErrorKind
    message: str

    @classmethod
    def bounds(cls, locus: int, max_index: int) -> StatError:
        return cls(
            ErrorKind.BOUNDS,
            f"Locus index {locus} out of bounds (max valid index: {max_index})",
        )

    @classmethod
    def zero_division(cls, message: str) -> StatError:
        return cls(ErrorKind.ZERO_DIVISION, message)

    @classmethod
    def invalid_argument(cls, message: str) -> StatError:
        return cls(ErrorKind.INVALID_ARGUMENT, message)

    @classmethod
    def domain(cls, message: str) -> StatError:
        return cls(ErrorKind.DOMAIN, message)

    @classmethod
    def cancelled(cls, message: str) -> StatError:
        return cls(ErrorKind.CANCELLED, message)

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class StatisticError(ValueError):
    """Raised by ``Err.unwrap``; carries the ``StatError`` it unwrapped."""

    def __init__(self, error: Any) -> None:
        super().__init__(f"Called unwrap on Err: {error}")
        self.error = error

    def __reduce__(self):
        return (StatisticError, (self.error,))


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Represents a successful result containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Returns the contained value."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def unwrap_err(self) -> Any:
        raise ValueError("Called unwrap_err on Ok value")

    def map(self, fn: Callable[[T], U]) -> Ok[U]:
        """Applies function to contained value."""
        return Ok(fn(self.value))

    def and_then(self, fn: Callable[[T], Result[U, Any]]) -> Result[U, Any]:
        """Chains another Result-returning function."""
        return fn(self.value)

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Represents a failed result containing an error."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> Any:
        """Raises StatisticError wrapping the contained error."""
        raise StatisticError(self.error)

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_err(self) -> E:
        """Returns the contained error."""
        return self.error

    def map(self, fn: Callable[[Any], Any]) -> Err[E]:
        return self

    def and_then(self, fn: Callable[[Any], Any]) -> Err[E]:
        """Returns self (short-circuits on error)."""
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Union[Ok[T], Err[E]]


def fail(error: StatError) -> None:
    """Abort the enclosing ``returns_result`` function with ``error``."""
    raise StatisticError(error)


def returns_result(fn: Callable[..., T]) -> Callable[..., Result[T, StatError]]:
    """
    Wrap a statistic so its return value becomes ``Ok`` and any
    ``StatisticError`` raised inside (by ``fail`` or a nested ``unwrap``)
    becomes ``Err`` with the original ``StatError``.

    A function that already returns a Result is passed through unchanged.
    """

    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            value = fn(*args, **kwargs)
        except StatisticError as e:
            return Err(e.error)
        if isinstance(value, (Ok, Err)):
            return value
        return Ok(value)

    return wrapper


def collect_results(results: List[Result[T, E]]) -> Result[List[T], E]:
    """
    Collects a list of Results into a Result of list.

    Returns the first Err encountered, otherwise Ok with all values.
    """
    values = []
    for result in results:
        if result.is_err():
            return result  # type: ignore
        values.append(result.unwrap())
    return Ok(values)
