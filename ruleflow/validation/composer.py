"""Rule Composer

Fluent builder over the built-in rules. Each step appends a named Rule whose
name includes its parameters ("min_length:5"), so results are cached per
parameter set when the built Validator has a cache. Steps that read sibling
fields (match_field, required_if) stay unnamed and are never cached.

Usage:
    validator = (
        compose()
        .required("Email is required")
        .email("Email is invalid")
        .min_length(5)
        .build(cache=True)
    )
    result = await validator.validate("user@example.com")
"""
from __future__ import annotations

import re
from typing import Any, Callable, Iterable, Pattern

from .contract import Predicate, Rule
from .registry import RuleRegistry
from .rules import basic, cross_field, format as format_rules
from .validator import Validator, create_validator

ALPHANUMERIC_RE = re.compile(r"^[A-Za-z0-9]+$")


class RuleComposer:
    """Collects rules in order and builds a Validator from them."""

    def __init__(self) -> None:
        self._rules: list[Rule] = []

    def _add(self, validator: Predicate, name: str | None, message: str | None = None, **meta: Any) -> RuleComposer:
        self._rules.append(Rule(validator, name=name, message=message, **meta))
        return self

    def required(self, message: str | None = None) -> RuleComposer:
        return self._add(basic.required, "required", message, required=True)

    def email(self, message: str | None = None) -> RuleComposer:
        return self._add(format_rules.email, "email", message)

    def url(self, message: str | None = None) -> RuleComposer:
        return self._add(format_rules.url, "url", message)

    def numeric(self, message: str | None = None) -> RuleComposer:
        return self._add(format_rules.numeric, "numeric", message)

    def integer(self, message: str | None = None) -> RuleComposer:
        return self._add(format_rules.integer, "integer", message)

    def date(self, message: str | None = None) -> RuleComposer:
        return self._add(format_rules.date, "date", message)

    def min_length(self, minimum: int, message: str | None = None) -> RuleComposer:
        return self._add(basic.min_length(minimum, message), f"min_length:{minimum}")

    def max_length(self, maximum: int, message: str | None = None) -> RuleComposer:
        return self._add(basic.max_length(maximum, message), f"max_length:{maximum}")

    def range(self, minimum: float, maximum: float, message: str | None = None) -> RuleComposer:
        return self._add(basic.value_range(minimum, maximum, message), f"range:{minimum}:{maximum}")

    def pattern(self, regex: str | Pattern[str], message: str | None = None) -> RuleComposer:
        compiled = re.compile(regex) if isinstance(regex, str) else regex
        return self._add(basic.pattern(compiled, message), f"pattern:{compiled.pattern}")

    def one_of(self, values: Iterable[Any], message: str | None = None) -> RuleComposer:
        allowed = tuple(values)
        return self._add(basic.one_of(allowed, message), f"one_of:{allowed!r}")

    def alphanumeric(self, message: str | None = None) -> RuleComposer:
        return self._add(
            basic.pattern(ALPHANUMERIC_RE, message or "Only letters and digits are allowed"),
            "alphanumeric",
        )

    def match_field(self, field_path: str, message: str | None = None) -> RuleComposer:
        return self._add(cross_field.match_field(field_path, message), None)

    def required_if(self, field_path: str, message: str | None = None) -> RuleComposer:
        return self._add(cross_field.required_if(field_path, message), None, skip_empty=False)

    def custom(self, name: str, validator: Predicate, message: str | None = None) -> RuleComposer:
        """Append any predicate under a caller-chosen cache name."""
        return self._add(validator, name, message)

    @property
    def rule_count(self) -> int:
        return len(self._rules)

    def clear(self) -> RuleComposer:
        self._rules.clear()
        return self

    def build(self, registry: RuleRegistry | None = None, **options: Any) -> Validator[Any]:
        """Create a Validator holding the composed rules.

        Keyword options go to ValidatorOptions (cache=True, pool=True, ...).
        """
        validator = create_validator(registry, **options)
        for rule in self._rules:
            validator.rule(rule)
        return validator


def compose() -> RuleComposer:
    return RuleComposer()


# =============================================================================
# Presets
# =============================================================================


def email_validator() -> Validator[Any]:
    return compose().required("Email is required").email("Email is invalid").build(cache=True)


def username_validator() -> Validator[Any]:
    return (
        compose()
        .required("Username is required")
        .min_length(3, "Username must be at least 3 characters")
        .max_length(20, "Username must be at most 20 characters")
        .alphanumeric()
        .build(cache=True)
    )


def url_validator() -> Validator[Any]:
    return compose().required("URL is required").url("URL is invalid").build(cache=True)


PRESETS: dict[str, Callable[[], Validator[Any]]] = {
    "email": email_validator,
    "username": username_validator,
    "url": url_validator,
}
