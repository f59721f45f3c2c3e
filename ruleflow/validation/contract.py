"""Rule Contract

Every rule wraps a predicate ``(value, context) -> ValidationResult`` that may
instead return an awaitable of a ValidationResult. The two return shapes are
the two branches of one sum type: ``then`` continues a computation on either
branch without forcing synchronous callers to suspend.
"""
from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, TypeVar, Union

from .types import ValidationContext, ValidationResult

T = TypeVar("T")

Outcome = Union[ValidationResult, Awaitable[ValidationResult]]
Predicate = Callable[[Any, "ValidationContext | None"], Outcome]
MessageSpec = Union[str, Callable[[Any, "ValidationContext | None"], str], None]


def is_empty(value: Any) -> bool:
    """The single definition of "empty" used throughout the engine."""
    return value is None or (isinstance(value, str) and value == "")


def same_value(a: Any, b: Any) -> bool:
    """Equality that keeps booleans apart from the numbers 0 and 1."""
    return (type(a) is bool) == (type(b) is bool) and a == b


def then(outcome: Any, fn: Callable[[Any], T]) -> T | Awaitable[T]:
    """Apply fn to an outcome now if it is ready, or after it resolves."""
    if inspect.isawaitable(outcome):
        async def _resolve() -> T:
            return fn(await outcome)
        return _resolve()
    return fn(outcome)


async def settle(outcome: Any) -> Any:
    """Await an outcome if it is awaitable."""
    if inspect.isawaitable(outcome):
        return await outcome
    return outcome


def coerce_result(raw: Any) -> ValidationResult:
    """Normalize a predicate return value into a ValidationResult.

    Accepts a ValidationResult, a bool, or a mapping with a ``valid`` key.
    """
    if isinstance(raw, ValidationResult):
        return raw
    if isinstance(raw, bool):
        return ValidationResult(valid=raw)
    if isinstance(raw, Mapping) and "valid" in raw:
        return ValidationResult(bool(raw["valid"]), raw.get("message"), raw.get("code"), raw.get("meta"))
    raise TypeError(f"Predicate returned {type(raw).__name__}, expected ValidationResult")


def resolve_message(message: MessageSpec, value: Any, context: ValidationContext | None) -> str | None:
    if callable(message):
        return message(value, context)
    return message


@dataclass(frozen=True, slots=True)
class Rule:
    """A predicate plus the metadata the executor acts on.

    A rule without a name is never cached. ``required`` is enforced by the
    executor before the predicate runs. ``skip_empty=False`` lets a predicate
    see empty values (conditional-required checks need this).
    """
    validator: Predicate
    name: str | None = None
    message: MessageSpec = None
    required: bool = False
    skip_empty: bool = True
