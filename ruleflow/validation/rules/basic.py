"""Basic Rules

Length, range, pattern and membership checks. Each factory returns a plain
predicate ``(value, context) -> ValidationResult``. Empty values pass: the
executor decides whether emptiness is an error via ``required``.
"""
from __future__ import annotations

import re
from collections.abc import Mapping, Sized
from typing import Any, Iterable, Pattern

from ruleflow.core.errors import ErrorCode

from ..coercion import is_number
from ..contract import is_empty, same_value
from ..types import ValidationContext, ValidationResult

_OK = ValidationResult.ok


def required(value: Any, context: ValidationContext | None = None) -> ValidationResult:
    if is_empty(value):
        return ValidationResult.fail("This field is required", ErrorCode.REQUIRED)
    return _OK()


def min_length(minimum: int, message: str | None = None):
    def check(value: Any, context: ValidationContext | None = None) -> ValidationResult:
        if is_empty(value):
            return _OK()
        if not isinstance(value, Sized) or len(value) < minimum:
            return ValidationResult.fail(
                message or f"Must be at least {minimum} characters",
                ErrorCode.MIN_LENGTH,
                {"min": minimum},
            )
        return _OK()
    return check


def max_length(maximum: int, message: str | None = None):
    def check(value: Any, context: ValidationContext | None = None) -> ValidationResult:
        if is_empty(value):
            return _OK()
        if not isinstance(value, Sized) or len(value) > maximum:
            return ValidationResult.fail(
                message or f"Must be at most {maximum} characters",
                ErrorCode.MAX_LENGTH,
                {"max": maximum},
            )
        return _OK()
    return check


def min_value(minimum: float, message: str | None = None):
    def check(value: Any, context: ValidationContext | None = None) -> ValidationResult:
        if is_empty(value):
            return _OK()
        if not is_number(value) or value < minimum:
            return ValidationResult.fail(message or f"Must not be less than {minimum}", ErrorCode.MIN, {"min": minimum})
        return _OK()
    return check


def max_value(maximum: float, message: str | None = None):
    def check(value: Any, context: ValidationContext | None = None) -> ValidationResult:
        if is_empty(value):
            return _OK()
        if not is_number(value) or value > maximum:
            return ValidationResult.fail(message or f"Must not be greater than {maximum}", ErrorCode.MAX, {"max": maximum})
        return _OK()
    return check


def value_range(minimum: float, maximum: float, message: str | None = None):
    """Inclusive numeric range."""
    if minimum > maximum:
        raise ValueError(f"value_range minimum {minimum} exceeds maximum {maximum}")

    def check(value: Any, context: ValidationContext | None = None) -> ValidationResult:
        if is_empty(value):
            return _OK()
        if not is_number(value) or not minimum <= value <= maximum:
            return ValidationResult.fail(
                message or f"Must be between {minimum} and {maximum}",
                ErrorCode.RANGE,
                {"min": minimum, "max": maximum},
            )
        return _OK()
    return check


def pattern(regex: str | Pattern[str], message: str | None = None):
    """Match a regular expression anywhere in a value (re.search).

    Numbers are matched by their string form; other non-strings fail.
    """
    compiled = re.compile(regex) if isinstance(regex, str) else regex

    def check(value: Any, context: ValidationContext | None = None) -> ValidationResult:
        if is_empty(value):
            return _OK()
        text = value if isinstance(value, str) else str(value) if is_number(value) else None
        if text is None or compiled.search(text) is None:
            return ValidationResult.fail(message or "Invalid format", ErrorCode.PATTERN, {"pattern": compiled.pattern})
        return _OK()
    return check


def one_of(values: Iterable[Any], message: str | None = None):
    allowed = tuple(values)

    def check(value: Any, context: ValidationContext | None = None) -> ValidationResult:
        if is_empty(value) or any(same_value(value, option) for option in allowed):
            return _OK()
        listing = ", ".join(str(v) for v in allowed)
        return ValidationResult.fail(message or f"Must be one of: {listing}", ErrorCode.ONE_OF, {"allowed": list(allowed)})
    return check


def array_length(minimum: int | None = None, maximum: int | None = None):
    def check(value: Any, context: ValidationContext | None = None) -> ValidationResult:
        if is_empty(value):
            return _OK()
        if not isinstance(value, (list, tuple)):
            return ValidationResult.fail("Must be an array", ErrorCode.NOT_ARRAY)
        if minimum is not None and len(value) < minimum:
            return ValidationResult.fail(f"Must contain at least {minimum} items", ErrorCode.ARRAY_MIN_LENGTH, {"min": minimum})
        if maximum is not None and len(value) > maximum:
            return ValidationResult.fail(f"Must contain at most {maximum} items", ErrorCode.ARRAY_MAX_LENGTH, {"max": maximum})
        return _OK()
    return check


def type_name(value: Any) -> str:
    """Runtime type name in the engine's vocabulary."""
    if isinstance(value, str):
        return "string"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    if value is None:
        return "null"
    return type(value).__name__


def type_of(expected: str, message: str | None = None):
    """Plain runtime-type comparison using type_name()."""
    def check(value: Any, context: ValidationContext | None = None) -> ValidationResult:
        if is_empty(value):
            return _OK()
        actual = type_name(value)
        if actual == expected:
            return _OK()
        return ValidationResult.fail(
            message or f"Expected {expected}, got {actual}",
            ErrorCode.TYPE_MISMATCH,
            {"expected": expected, "actual": actual},
        )
    return check
