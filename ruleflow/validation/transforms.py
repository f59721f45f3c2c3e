"""Value Transforms

Named transforms applied by the schema executor when auto_transform is on,
and a fluent Transformer for building pipelines in code.

String transforms pass non-strings through. Coercions (to_number, to_int, ...)
leave the value unchanged when it cannot be converted.
"""
from __future__ import annotations

import re
from typing import Any, Callable, Iterable, Sequence

from ruleflow.core.errors import Result, UnknownTransformError

from . import coercion
from .contract import is_empty

TransformFn = Callable[[Any], Any]
TransformSpec = Sequence[str] | TransformFn

_HTML_TAG = re.compile(r"<[^>]*>")

# =============================================================================
# String Transforms
# =============================================================================

_trim = lambda v: v.strip() if isinstance(v, str) else v
_lower = lambda v: v.lower() if isinstance(v, str) else v
_upper = lambda v: v.upper() if isinstance(v, str) else v
_capitalize = lambda v: v[:1].upper() + v[1:].lower() if isinstance(v, str) else v
_normalize_whitespace = lambda v: " ".join(v.split()) if isinstance(v, str) else v
_strip_html = lambda v: _HTML_TAG.sub("", v) if isinstance(v, str) else v

# =============================================================================
# Coercions
# =============================================================================


def _coerce_or_keep(convert: Callable[[Any], Result[Any, str]]) -> TransformFn:
    def apply(value: Any) -> Any:
        return convert(value).unwrap_or(value)
    return apply


BUILTIN_TRANSFORMS: dict[str, TransformFn] = {
    "trim": _trim,
    "lower": _lower,
    "upper": _upper,
    "capitalize": _capitalize,
    "normalize_whitespace": _normalize_whitespace,
    "strip_html": _strip_html,
    "to_number": _coerce_or_keep(coercion.to_number),
    "to_int": _coerce_or_keep(coercion.to_int),
    "to_float": _coerce_or_keep(coercion.to_float),
    "to_bool": _coerce_or_keep(coercion.to_bool),
    "to_date": _coerce_or_keep(coercion.to_datetime),
}

# camelCase names accepted in dict-declared schemas
TRANSFORM_ALIASES: dict[str, str] = {
    "toLowerCase": "lower",
    "toUpperCase": "upper",
    "normalizeWhitespace": "normalize_whitespace",
    "stripHtml": "strip_html",
    "toNumber": "to_number",
    "toInteger": "to_int",
    "toFloat": "to_float",
    "toBoolean": "to_bool",
    "toDate": "to_date",
}


def get_transform(name: str) -> TransformFn:
    """Look up a built-in transform by name or alias."""
    canonical = TRANSFORM_ALIASES.get(name, name)
    try:
        return BUILTIN_TRANSFORMS[canonical]
    except KeyError:
        raise UnknownTransformError(name, list(BUILTIN_TRANSFORMS)) from None


def pipeline(steps: Iterable[TransformFn]) -> TransformFn:
    steps = tuple(steps)

    def apply(value: Any) -> Any:
        for step in steps:
            value = step(value)
        return value
    return apply


def compile_transform(spec: TransformSpec) -> TransformFn:
    """Turn a list of transform names, or a callable, into one function.

    Unknown names raise UnknownTransformError here rather than at use.
    """
    if callable(spec):
        return spec
    if isinstance(spec, str):
        return get_transform(spec)
    return pipeline(get_transform(name) for name in spec)


class Transformer:
    """Fluent transform pipeline.

    Usage:
        normalize = Transformer().trim().lower().build()
        normalize("  Alice@Example.COM ")  # "alice@example.com"
    """

    def __init__(self) -> None:
        self._steps: list[TransformFn] = []

    def custom(self, fn: TransformFn) -> Transformer:
        self._steps.append(fn)
        return self

    def named(self, name: str) -> Transformer:
        return self.custom(get_transform(name))

    def trim(self) -> Transformer: return self.custom(_trim)
    def lower(self) -> Transformer: return self.custom(_lower)
    def upper(self) -> Transformer: return self.custom(_upper)
    def capitalize(self) -> Transformer: return self.custom(_capitalize)
    def normalize_whitespace(self) -> Transformer: return self.custom(_normalize_whitespace)
    def strip_html(self) -> Transformer: return self.custom(_strip_html)
    def to_number(self) -> Transformer: return self.named("to_number")
    def to_int(self) -> Transformer: return self.named("to_int")
    def to_float(self) -> Transformer: return self.named("to_float")
    def to_bool(self) -> Transformer: return self.named("to_bool")
    def to_date(self) -> Transformer: return self.named("to_date")

    def replace(self, pattern: str | re.Pattern[str], replacement: str) -> Transformer:
        compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
        return self.custom(lambda v: compiled.sub(replacement, v) if isinstance(v, str) else v)

    def truncate(self, max_length: int, suffix: str = "...") -> Transformer:
        def cut(v: Any) -> Any:
            if not isinstance(v, str) or len(v) <= max_length:
                return v
            return v[: max(max_length - len(suffix), 0)] + suffix
        return self.custom(cut)

    def default(self, fallback: Any) -> Transformer:
        """Replace None or "" with fallback."""
        return self.custom(lambda v: fallback if is_empty(v) else v)

    def build(self) -> TransformFn:
        return pipeline(self._steps)

    def apply(self, value: Any) -> Any:
        return self.build()(value)

    def clear(self) -> Transformer:
        self._steps.clear()
        return self

    def __len__(self) -> int:
        return len(self._steps)