"""Error Codes and Result Types

Validation outcomes are values, not exceptions. Every failing result carries a
code from the taxonomy below; a small Ok/Err pair carries fallible coercions
without raising.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, NoReturn, TypeVar, Union, final

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


class ErrorCode(str, Enum):
    """Code taxonomy for validation results.

    Members compare equal to their string value, so ``result.code == "REQUIRED"``
    holds for engine-produced results. User predicates may emit any other string.
    """
    # Required-ness
    REQUIRED = "REQUIRED"
    REQUIRED_IF = "REQUIRED_IF"

    # Engine
    RULE_ERROR = "RULE_ERROR"

    # Structural (schema and basic rules)
    TYPE_MISMATCH = "TYPE_MISMATCH"
    ARRAY_ITEM_INVALID = "ARRAY_ITEM_INVALID"
    MIN_LENGTH = "MIN_LENGTH"
    MAX_LENGTH = "MAX_LENGTH"
    MIN = "MIN"
    MAX = "MAX"
    RANGE = "RANGE"
    PATTERN = "PATTERN"
    ENUM = "ENUM"
    ONE_OF = "ONE_OF"
    NOT_ARRAY = "NOT_ARRAY"
    ARRAY_MIN_LENGTH = "ARRAY_MIN_LENGTH"
    ARRAY_MAX_LENGTH = "ARRAY_MAX_LENGTH"

    # Format
    INVALID_EMAIL = "INVALID_EMAIL"
    INVALID_URL = "INVALID_URL"
    NOT_NUMERIC = "NOT_NUMERIC"
    NOT_INTEGER = "NOT_INTEGER"
    INVALID_DATE = "INVALID_DATE"
    INVALID_TYPE = "INVALID_TYPE"

    # Cross-field
    FIELD_MISMATCH = "FIELD_MISMATCH"
    NOT_GREATER_THAN = "NOT_GREATER_THAN"
    NOT_LESS_THAN = "NOT_LESS_THAN"
    DATE_NOT_AFTER = "DATE_NOT_AFTER"
    DATE_NOT_BEFORE = "DATE_NOT_BEFORE"
    FIELD_EXCLUDES = "FIELD_EXCLUDES"

    # Combinators
    OR_ALL_FAILED = "OR_ALL_FAILED"
    NOT = "NOT"
    CUSTOM = "CUSTOM"

    def __str__(self) -> str:
        return self.value


@final
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Success variant of Result."""
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        """Transform the success value."""
        return Ok(f(self.value))

    def and_then(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Chain operations that may fail."""
        return f(self.value)


@final
@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failure variant of Result."""
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        """Raises because Err has no value to unwrap."""
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_err(self) -> E:
        return self.error

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        """No-op for Err variant."""
        return self  # type: ignore

    def and_then(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """No-op for Err variant."""
        return self  # type: ignore


Result = Union[Ok[T], Err[E]]


def try_result(f: Callable[[], T]) -> Result[T, str]:
    """Execute function and wrap its outcome; exceptions become Err(message)."""
    try:
        return Ok(f())
    except (TypeError, ValueError, OverflowError) as e:
        return Err(str(e))
