"""Cache key hashing.

Folds (value, rule name, params) into a short base-36 djb2 digest. Large
composite values are sampled: only their size and a bounded prefix are
hashed, so two large structures differing past the prefix may share a key.
"""
from __future__ import annotations

from collections.abc import Mapping, Set
from typing import Any

SAMPLE_THRESHOLD = 10
SAMPLE_SIZE = 3

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def djb2(text: str) -> int:
    """32-bit djb2 string hash (hash * 33 + c)."""
    h = 5381
    for ch in text:
        h = ((h << 5) + h + ord(ch)) & 0xFFFFFFFF
    return h


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_DIGITS[rem])
    return "".join(reversed(digits))


def flatten(value: Any) -> str:
    """Textual form of a value for hashing.

    Scalars use repr so 1, "1" and True stay distinct.
    """
    if value is None or isinstance(value, (str, int, float, bool)):
        return repr(value)

    if isinstance(value, Mapping):
        keys = list(value.keys())
        if len(keys) <= SAMPLE_THRESHOLD:
            pairs = sorted(f"{k!r}:{flatten(value[k])}" for k in keys)
            return "{" + ",".join(pairs) + "}"
        pairs = sorted(f"{k!r}:{flatten(value[k])}" for k in keys[:SAMPLE_SIZE])
        return "{" + f"{len(keys)}:" + ",".join(pairs) + "}"

    if isinstance(value, Set):
        items = sorted(flatten(v) for v in value)
        if len(items) <= SAMPLE_THRESHOLD:
            return "<" + ",".join(items) + ">"
        return "<" + f"{len(items)}:" + ",".join(items[:SAMPLE_SIZE]) + ">"

    if isinstance(value, (list, tuple)):
        if len(value) <= SAMPLE_THRESHOLD:
            return "[" + ",".join(flatten(v) for v in value) + "]"
        return "[" + f"{len(value)}:" + ",".join(flatten(v) for v in value[:SAMPLE_SIZE]) + "]"

    return f"{type(value).__name__}:{value!r}"


def fast_hash(value: Any, rule_name: str, params: Any = None) -> str:
    """Short, deterministic cache key for a rule evaluation."""
    params_text = flatten(params) if params is not None else ""
    return to_base36(djb2(f"{rule_name}:{flatten(value)}:{params_text}"))
