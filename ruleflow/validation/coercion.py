"""Value Coercion

Explicit conversions used by format rules, cross-field comparisons and
transforms. Each returns a Result: a value that cannot be converted is an Err
carrying the reason, never an exception.

bool is not a number here, even though Python treats it as int.
"""
from __future__ import annotations

import math
import numbers
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from ruleflow.core.errors import Err, Ok, Result, try_result

TRUE_STRINGS = frozenset({"true", "1", "yes", "on", "y"})
FALSE_STRINGS = frozenset({"false", "0", "no", "off", "n", ""})


def is_number(value: Any) -> bool:
    """True for real numbers other than bool and NaN."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return not math.isnan(value)


def to_number(value: Any) -> Result[int | float, str]:
    """Coerce to int or float. Numeric strings are parsed, integers stay integers."""
    if isinstance(value, bool):
        return Err("booleans are not numbers")
    if isinstance(value, numbers.Real):
        if math.isnan(value):
            return Err("NaN is not a number")
        return Ok(value if isinstance(value, (int, float)) else float(value))
    if not isinstance(value, str):
        return Err(f"cannot convert {type(value).__name__} to a number")

    text = value.strip()
    if not text:
        return Err("empty string is not a number")
    as_int = try_result(lambda: int(text))
    if as_int.is_ok():
        return as_int
    as_float = try_result(lambda: float(text))
    if as_float.is_err():
        return Err(f"'{value}' is not a number")
    number = as_float.unwrap()
    if math.isnan(number):
        return Err("NaN is not a number")
    return Ok(number)


def to_float(value: Any) -> Result[float, str]:
    return to_number(value).map(float)


def to_int(value: Any) -> Result[int, str]:
    """Coerce to int, truncating toward zero. Infinite values fail."""
    number = to_number(value)
    if number.is_err():
        return number
    n = number.unwrap()
    if isinstance(n, int):
        return Ok(n)
    if math.isinf(n):
        return Err("infinity is not an integer")
    return Ok(int(n))


def is_integral(value: Any) -> bool:
    """A number, or numeric string, with no fractional part."""
    number = to_number(value)
    if number.is_err():
        return False
    n = number.unwrap()
    return isinstance(n, int) or (math.isfinite(n) and n.is_integer())


def to_bool(value: Any) -> Result[bool, str]:
    if isinstance(value, bool):
        return Ok(value)
    if isinstance(value, (int, float, Decimal)):
        return Ok(value != 0)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_STRINGS:
            return Ok(True)
        if text in FALSE_STRINGS:
            return Ok(False)
        return Err(f"'{value}' is not a boolean")
    return Err(f"cannot convert {type(value).__name__} to a boolean")


def to_datetime(value: Any) -> Result[datetime, str]:
    """Coerce to an aware datetime.

    Accepts datetime and date objects, ISO 8601 strings (a trailing ``Z`` is
    UTC) and numbers as Unix timestamps in seconds. Naive values are UTC.
    """
    if isinstance(value, datetime):
        return Ok(value if value.tzinfo else value.replace(tzinfo=timezone.utc))
    if isinstance(value, date):
        return Ok(datetime(value.year, value.month, value.day, tzinfo=timezone.utc))
    if isinstance(value, bool):
        return Err("booleans are not dates")
    if isinstance(value, (int, float)):
        try:
            return Ok(datetime.fromtimestamp(value, tz=timezone.utc))
        except (OverflowError, OSError, ValueError) as e:
            return Err(f"timestamp {value} is out of range: {e}")
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return Err(f"'{value}' is not an ISO 8601 date")
        return Ok(parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc))
    return Err(f"cannot convert {type(value).__name__} to a date")

