"""Format Rules

Plain predicates (not factories) for common string formats.
"""
from __future__ import annotations

import re
from typing import Any
from urllib.parse import urlsplit

from ruleflow.core.errors import ErrorCode

from ..coercion import is_integral, to_datetime, to_number
from ..contract import is_empty
from ..types import ValidationContext, ValidationResult

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def email(value: Any, context: ValidationContext | None = None) -> ValidationResult:
    if is_empty(value):
        return ValidationResult.ok()
    if isinstance(value, str) and EMAIL_RE.match(value):
        return ValidationResult.ok()
    return ValidationResult.fail("Please enter a valid email address", ErrorCode.INVALID_EMAIL)


def is_url(value: Any) -> bool:
    """Absolute URL with a scheme and a network location."""
    if not isinstance(value, str) or any(ch.isspace() for ch in value):
        return False
    try:
        parts = urlsplit(value)
        # Accessing port validates it
        parts.port
    except ValueError:
        return False
    return bool(parts.scheme and parts.netloc)


def url(value: Any, context: ValidationContext | None = None) -> ValidationResult:
    if is_empty(value) or is_url(value):
        return ValidationResult.ok()
    return ValidationResult.fail("Please enter a valid URL", ErrorCode.INVALID_URL)


def numeric(value: Any, context: ValidationContext | None = None) -> ValidationResult:
    """Numbers and numeric strings."""
    if is_empty(value) or to_number(value).is_ok():
        return ValidationResult.ok()
    return ValidationResult.fail("Please enter a valid number", ErrorCode.NOT_NUMERIC)


def integer(value: Any, context: ValidationContext | None = None) -> ValidationResult:
    """Whole numbers, including integral floats and strings such as "3.0"."""
    if is_empty(value) or is_integral(value):
        return ValidationResult.ok()
    return ValidationResult.fail("Please enter a whole number", ErrorCode.NOT_INTEGER)


def date(value: Any, context: ValidationContext | None = None) -> ValidationResult:
    """datetime/date objects, ISO 8601 strings and Unix timestamps."""
    if is_empty(value) or to_datetime(value).is_ok():
        return ValidationResult.ok()
    return ValidationResult.fail("Please enter a valid date", ErrorCode.INVALID_DATE)
