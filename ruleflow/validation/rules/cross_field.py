"""Cross-field Rules

Predicates that compare a value with a sibling field read from
``context.form_data`` by dotted path ("user.email", "items.0.sku").
Lookups never raise: any missing step yields None. form_data is only read.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date as date_type
from typing import Any

from ruleflow.core.errors import ErrorCode

from ..coercion import to_datetime, to_number
from ..contract import is_empty, same_value
from ..types import ValidationContext, ValidationResult


def get_field_value(field_path: str, context: ValidationContext | None) -> Any:
    """Resolve a dotted path against the context's form data."""
    if context is None or not context.form_data:
        return None

    current: Any = context.form_data
    for key in field_path.split("."):
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(key)
        elif isinstance(current, Sequence) and not isinstance(current, str) and key.lstrip("-").isdigit():
            index = int(key)
            if not -len(current) <= index < len(current):
                return None
            current = current[index]
        else:
            return None
    return current


def _comparable(value: Any) -> float | None:
    """Numbers compare as numbers, dates as timestamps."""
    if isinstance(value, date_type):
        return to_datetime(value).unwrap().timestamp()
    number = to_number(value)
    return number.unwrap() if number.is_ok() else None


def match_field(field_path: str, message: str | None = None):
    def check(value: Any, context: ValidationContext | None = None) -> ValidationResult:
        compare_value = get_field_value(field_path, context)
        if same_value(value, compare_value):
            return ValidationResult.ok()
        return ValidationResult.fail(
            message or f'Must match the value of "{field_path}"',
            ErrorCode.FIELD_MISMATCH,
            {"field_path": field_path, "compare_value": compare_value},
        )
    return check


def _ordered(field_path: str, allow_equal: bool, message: str | None, greater: bool):
    if greater:
        operator, code = (">=" if allow_equal else ">"), ErrorCode.NOT_GREATER_THAN
    else:
        operator, code = ("<=" if allow_equal else "<"), ErrorCode.NOT_LESS_THAN

    def check(value: Any, context: ValidationContext | None = None) -> ValidationResult:
        compare_value = get_field_value(field_path, context)
        if is_empty(compare_value):
            return ValidationResult.ok()

        left, right = _comparable(value), _comparable(compare_value)
        if left is None or right is None:
            return ValidationResult.fail("Value must be a number or a date", ErrorCode.INVALID_TYPE)

        if greater:
            valid = left >= right if allow_equal else left > right
        else:
            valid = left <= right if allow_equal else left < right
        if valid:
            return ValidationResult.ok()
        return ValidationResult.fail(
            message or f'Must be {operator} the value of "{field_path}"',
            code,
            {"field_path": field_path, "compare_value": compare_value, "operator": operator},
        )
    return check


def greater_than(field_path: str, allow_equal: bool = False, message: str | None = None):
    """Numeric or date comparison against another field. A missing field passes."""
    return _ordered(field_path, allow_equal, message, greater=True)


def less_than(field_path: str, allow_equal: bool = False, message: str | None = None):
    return _ordered(field_path, allow_equal, message, greater=False)


def _dated(field_path: str, allow_same: bool, message: str | None, after: bool):
    code = ErrorCode.DATE_NOT_AFTER if after else ErrorCode.DATE_NOT_BEFORE
    direction = "after" if after else "before"

    def check(value: Any, context: ValidationContext | None = None) -> ValidationResult:
        compare_value = get_field_value(field_path, context)
        if is_empty(compare_value):
            return ValidationResult.ok()

        left, right = to_datetime(value), to_datetime(compare_value)
        if left.is_err() or right.is_err():
            return ValidationResult.fail("Must be a valid date", ErrorCode.INVALID_DATE)

        a, b = left.unwrap(), right.unwrap()
        if after:
            valid = a >= b if allow_same else a > b
        else:
            valid = a <= b if allow_same else a < b
        if valid:
            return ValidationResult.ok()
        return ValidationResult.fail(
            message or f'Date must be {direction} "{field_path}"',
            code,
            {"field_path": field_path, "compare_value": compare_value},
        )
    return check


def after_date(field_path: str, allow_same: bool = False, message: str | None = None):
    return _dated(field_path, allow_same, message, after=True)


def before_date(field_path: str, allow_same: bool = False, message: str | None = None):
    return _dated(field_path, allow_same, message, after=False)


def required_if(field_path: str, message: str | None = None):
    """Required only while the other field is non-empty.

    Must run on empty values, so register it with skip_empty=False.
    """
    def check(value: Any, context: ValidationContext | None = None) -> ValidationResult:
        depend_value = get_field_value(field_path, context)
        if is_empty(depend_value) or not is_empty(value):
            return ValidationResult.ok()
        return ValidationResult.fail(
            message or f'This field is required when "{field_path}" is set',
            ErrorCode.REQUIRED_IF,
            {"field_path": field_path, "depend_value": depend_value},
        )
    return check


def excludes_with(field_path: str, message: str | None = None):
    """Must be empty while the other field is non-empty."""
    def check(value: Any, context: ValidationContext | None = None) -> ValidationResult:
        if is_empty(value):
            return ValidationResult.ok()
        exclude_value = get_field_value(field_path, context)
        if is_empty(exclude_value):
            return ValidationResult.ok()
        return ValidationResult.fail(
            message or f'Cannot be set together with "{field_path}"',
            ErrorCode.FIELD_EXCLUDES,
            {"field_path": field_path, "exclude_value": exclude_value},
        )
    return check
