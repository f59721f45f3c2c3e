"""Rule Combinators

Compose predicates into new predicates. Composed predicates are synchronous
when every sub-predicate they actually run is synchronous; they return an
awaitable only once a sub-predicate does. Chains built from synchronous parts
therefore keep working with Validator.validate_sync.

Sub-predicates may return a ValidationResult, a bool or a mapping with a
``valid`` key (see coerce_result).
"""
from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, Sequence

from ruleflow.core.errors import ErrorCode

from ..contract import Outcome, Predicate, coerce_result, settle, then as _then
from ..types import ValidationContext, ValidationResult
from .cross_field import get_field_value

Condition = Callable[[Any, "ValidationContext | None"], bool]


def and_(*rules: Predicate) -> Predicate:
    """All rules must pass. Returns the first failure unchanged."""
    def check(value: Any, context: ValidationContext | None = None) -> Outcome:
        return _all_from(iter(rules), value, context)
    return check


def _all_from(rules: Iterator[Predicate], value: Any, context: ValidationContext | None) -> Outcome:
    for rule in rules:
        outcome = rule(value, context)
        if inspect.isawaitable(outcome):
            return _all_resume(outcome, rules, value, context)
        result = coerce_result(outcome)
        if not result.valid:
            return result
    return ValidationResult.ok()


async def _all_resume(pending: Any, rules: Iterator[Predicate], value: Any, context: ValidationContext | None) -> ValidationResult:
    result = coerce_result(await pending)
    if not result.valid:
        return result
    return await settle(_all_from(rules, value, context))


def or_(*rules: Predicate) -> Predicate:
    """Passes as soon as one rule passes.

    On total failure the message joins every sub-failure message.
    """
    def check(value: Any, context: ValidationContext | None = None) -> Outcome:
        return _any_from(iter(rules), value, context, [])
    return check


def _any_from(rules: Iterator[Predicate], value: Any, context: ValidationContext | None, messages: list[str]) -> Outcome:
    for rule in rules:
        outcome = rule(value, context)
        if inspect.isawaitable(outcome):
            return _any_resume(outcome, rules, value, context, messages)
        if _passed(coerce_result(outcome), messages):
            return ValidationResult.ok()
    return _all_failed(messages)


async def _any_resume(
    pending: Any,
    rules: Iterator[Predicate],
    value: Any,
    context: ValidationContext | None,
    messages: list[str],
) -> ValidationResult:
    if _passed(coerce_result(await pending), messages):
        return ValidationResult.ok()
    return await settle(_any_from(rules, value, context, messages))


def _passed(result: ValidationResult, messages: list[str]) -> bool:
    if result.valid:
        return True
    if result.message:
        messages.append(result.message)
    return False


def _all_failed(messages: list[str]) -> ValidationResult:
    return ValidationResult.fail(
        f"All rules failed: {'; '.join(messages)}",
        ErrorCode.OR_ALL_FAILED,
        {"messages": list(messages)},
    )


def not_(rule: Predicate, message: str | None = None) -> Predicate:
    """Inverts the verdict of a rule."""
    def invert(raw: Any) -> ValidationResult:
        if coerce_result(raw).valid:
            return ValidationResult.fail(message or "Value must not pass this rule", ErrorCode.NOT)
        return ValidationResult.ok()

    def check(value: Any, context: ValidationContext | None = None) -> Outcome:
        return _then(rule(value, context), invert)
    return check


def when(condition: Condition, then: Predicate, otherwise: Predicate | None = None) -> Predicate:
    """Run ``then`` when the condition holds, else ``otherwise`` (or pass).

    Example:
        when(lambda v, ctx: get_field_value("country", ctx) == "US", then=pattern(r"^\\d{5}$"))
    """
    def check(value: Any, context: ValidationContext | None = None) -> Outcome:
        if condition(value, context):
            return then(value, context)
        if otherwise is not None:
            return otherwise(value, context)
        return ValidationResult.ok()
    return check


@dataclass(frozen=True, slots=True)
class ConditionalRoute:
    condition: Condition
    validator: Predicate


def conditional(routes: Iterable[ConditionalRoute | tuple[Condition, Predicate]], default: Predicate | None = None) -> Predicate:
    """First matching route wins; ``default`` runs when none match."""
    table: Sequence[ConditionalRoute] = tuple(
        route if isinstance(route, ConditionalRoute) else ConditionalRoute(*route) for route in routes
    )

    def check(value: Any, context: ValidationContext | None = None) -> Outcome:
        for route in table:
            if route.condition(value, context):
                return route.validator(value, context)
        if default is not None:
            return default(value, context)
        return ValidationResult.ok()
    return check


def ref(field_path: str) -> Callable[[ValidationContext | None], Any]:
    """Accessor for a sibling value, for use inside custom predicates."""
    def lookup(context: ValidationContext | None) -> Any:
        return get_field_value(field_path, context)
    return lookup


def custom(fn: Callable[[Any, ValidationContext | None], Any], message: str | None = None,
           code: ErrorCode | str | None = None) -> Predicate:
    """Adapt a predicate returning bool (or a full result) into a rule."""
    def normalize(raw: Any) -> ValidationResult:
        if isinstance(raw, bool):
            if raw:
                return ValidationResult.ok()
            return ValidationResult.fail(message or "Custom validation failed", code or ErrorCode.CUSTOM)
        return coerce_result(raw)

    def check(value: Any, context: ValidationContext | None = None) -> Outcome:
        return _then(fn(value, context), normalize)
    return check


def lazy(factory: Callable[[Any, ValidationContext | None], Predicate]) -> Predicate:
    """Build the rule per call, from the value and context."""
    def check(value: Any, context: ValidationContext | None = None) -> Outcome:
        return factory(value, context)(value, context)
    return check
