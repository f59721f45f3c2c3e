"""Schema Executor

Validates a record (a mapping of field name -> value) against a schema of
declarative field rules. Fields are evaluated one at a time in declaration
order, so ``errors`` always follows the schema's field order.

Per field rule:
1. absent value (missing or None) + declared default -> use the default
2. auto_transform + declared transform -> transform the value (a transform
   that raises fails the field with RULE_ERROR)
3. required, empty-skip, type, min, max, min_length, max_length, pattern, enum
4. items (every element of a list value, recursively)
5. custom validator

The first failing check ends the field. With stop_on_first_error the first
failing field ends the whole validation.

Schemas may be declared with SchemaRule instances or plain dicts, using
snake_case or camelCase keys:

    schema = create_schema_validator({
        "email": {"type": "email", "required": True, "transform": ["trim", "lower"]},
        "age": {"type": "number", "min": 18, "default": 18},
        "tags": {"type": "array", "items": {"type": "string", "minLength": 2}},
    }, auto_transform=True)
"""
from __future__ import annotations

import copy
import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ruleflow.core.errors import ErrorCode
from ruleflow.core.logging import schema_logger

from .coercion import is_number
from .contract import Rule, coerce_result, is_empty, settle
from .pool import PoolOptions, ResultPool
from .rules import basic, format as format_rules
from .transforms import TransformFn, compile_transform
from .types import SchemaValidationResult, ValidationContext, ValidationError, ValidationResult
from .validator import ErrorHook, Validator, report_rule_error

log = schema_logger()

DEFAULT_FIELD_MESSAGE = "Validation failed"

# Type names with a dedicated format check instead of a runtime-type comparison
_DEDICATED_TYPES = {
    "email": format_rules.email,
    "url": format_rules.url,
    "number": format_rules.numeric,
    "date": format_rules.date,
}


class SchemaRule(BaseModel):
    """Declarative checks for one field.

    ``min``/``max`` bound the length of strings and arrays and the value of
    numbers. ``min_length``/``max_length`` bound length only. ``message``
    replaces the message of whichever check fails.
    """
    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    type: str | None = None
    required: bool = False
    min: int | float | None = None
    max: int | float | None = None
    min_length: int | None = None
    max_length: int | None = None
    pattern: re.Pattern[str] | None = None
    enum: tuple[Any, ...] | None = None
    validator: Callable[..., Any] | None = None
    items: SchemaRule | None = None
    transform: list[str] | Callable[[Any], Any] | None = None
    default: Any = None
    message: str | None = None

    @property
    def has_default(self) -> bool:
        return "default" in self.model_fields_set


SchemaRule.model_rebuild()

RuleSpec = SchemaRule | Mapping[str, Any]
FieldSpec = RuleSpec | Sequence[RuleSpec]


def to_schema_rule(spec: RuleSpec) -> SchemaRule:
    if isinstance(spec, SchemaRule):
        return spec
    return SchemaRule.model_validate(spec)


@dataclass(frozen=True, slots=True)
class _FieldPlan:
    rule: SchemaRule
    transform: TransformFn | None


@dataclass(frozen=True, slots=True)
class SchemaValidatorOptions:
    stop_on_first_error: bool = False
    auto_transform: bool = False
    report_all_items: bool = False
    on_error: ErrorHook | None = None
    pool: bool = False
    pool_instance: ResultPool | None = None


class SchemaValidator:
    """Field-by-field record validator.

    Transform names are resolved when the validator is built; an unknown name
    raises UnknownTransformError here rather than during validation.
    """

    def __init__(self, schema: Mapping[str, FieldSpec], options: SchemaValidatorOptions | None = None):
        self.options = options or SchemaValidatorOptions()
        self._fields: list[tuple[str, list[_FieldPlan]]] = []
        for field_name, spec in schema.items():
            specs = spec if isinstance(spec, (list, tuple)) else [spec]
            plans = []
            for item in specs:
                rule = to_schema_rule(item)
                transform = compile_transform(rule.transform) if rule.transform is not None else None
                plans.append(_FieldPlan(rule, transform))
            self._fields.append((field_name, plans))

        self._pool: ResultPool | None = None
        if self.options.pool_instance is not None:
            self._pool = self.options.pool_instance
        elif self.options.pool:
            self._pool = ResultPool(PoolOptions())

    @property
    def fields(self) -> list[str]:
        return [name for name, _ in self._fields]

    def rules_for(self, field_name: str) -> list[SchemaRule]:
        for name, plans in self._fields:
            if name == field_name:
                return [plan.rule for plan in plans]
        return []

    async def validate(self, record: Mapping[str, Any] | None, context: ValidationContext | None = None) -> SchemaValidationResult:
        """Validate a record. Never raises for invalid data.

        ``context`` contributes label and params; field and form_data are set
        per field. form_data reflects defaults and transforms applied so far.
        """
        if record is not None and not isinstance(record, Mapping):
            raise TypeError(f"Expected a mapping, got {type(record).__name__}")

        data: dict[str, Any] = dict(record or {})
        base = context or ValidationContext()
        errors: list[ValidationError] = []

        for field_name, plans in self._fields:
            value = data.get(field_name)
            for plan in plans:
                rule = plan.rule
                if value is None and rule.has_default:
                    value = copy.deepcopy(rule.default)
                    data[field_name] = value

                error: ValidationError | None = None
                if self.options.auto_transform and plan.transform is not None:
                    try:
                        value = plan.transform(value)
                    except Exception as exc:
                        error = self._transform_failed(field_name, value, plan, exc)
                    else:
                        data[field_name] = value

                if error is None:
                    error = await self._check_field(field_name, value, rule, base.for_field(field_name, data))
                if error is None:
                    continue

                errors.append(error)
                if self.options.stop_on_first_error:
                    log.debug("schema_stopped", field=field_name, code=str(error.code))
                    return SchemaValidationResult.from_errors(errors)
                break

        log.debug("schema_validated", fields=len(self._fields), errors=len(errors))
        return SchemaValidationResult.from_errors(errors)

    # =========================================================================
    # Field checks
    # =========================================================================

    def _transform_failed(self, field_name: str, value: Any, plan: _FieldPlan, exc: Exception) -> ValidationError:
        result = report_rule_error(exc, Rule(plan.transform, name=field_name), value, self.options.on_error)
        return ValidationError(
            field=field_name,
            message=plan.rule.message or result.message,
            code=result.code,
            rule="transform",
        )

    async def _check_field(self, field_name: str, value: Any, rule: SchemaRule,
                           context: ValidationContext) -> ValidationError | None:
        record = self._pool.acquire() if self._pool is not None else ValidationResult()
        try:
            failed = await self._run_checks(record, field_name, value, rule, context)
            if failed is None:
                return None
            return ValidationError(
                field=field_name,
                message=record.message or DEFAULT_FIELD_MESSAGE,
                code=record.code,
                rule=failed,
            )
        finally:
            if self._pool is not None:
                self._pool.release(record)

    async def _run_checks(self, record: ValidationResult, field_name: str, value: Any,
                          rule: SchemaRule, context: ValidationContext) -> str | None:
        """Run every check of one rule. On failure fill ``record`` and return the check name."""
        def fail(check: str, result: ValidationResult, code: ErrorCode | str | None = None) -> str:
            record.assign(False, rule.message or result.message, code or result.code, result.meta)
            return check

        if rule.required and is_empty(value):
            return fail("required", basic.required(value, context), ErrorCode.REQUIRED)

        if is_empty(value):
            return None

        if rule.type:
            result = self._check_type(value, rule.type, context)
            if not result.valid:
                return fail("type", result)

        if rule.min is not None:
            result = self._check_bound(value, rule.min, context, lower=True)
            if result is not None and not result.valid:
                return fail("min", result)

        if rule.max is not None:
            result = self._check_bound(value, rule.max, context, lower=False)
            if result is not None and not result.valid:
                return fail("max", result)

        if rule.min_length is not None:
            result = basic.min_length(rule.min_length)(value, context)
            if not result.valid:
                return fail("min_length", result)

        if rule.max_length is not None:
            result = basic.max_length(rule.max_length)(value, context)
            if not result.valid:
                return fail("max_length", result)

        if rule.pattern is not None:
            result = basic.pattern(rule.pattern)(value, context)
            if not result.valid:
                return fail("pattern", result)

        if rule.enum is not None:
            result = basic.one_of(rule.enum)(value, context)
            if not result.valid:
                return fail("enum", result, ErrorCode.ENUM)

        if rule.items is not None and isinstance(value, (list, tuple)):
            failed = await self._check_items(record, field_name, value, rule, context)
            if failed is not None:
                return failed

        if rule.validator is not None:
            result = await self._run_custom(field_name, value, rule.validator, context)
            if not result.valid:
                return fail("validator", result)

        return None

    def _check_type(self, value: Any, expected: str, context: ValidationContext) -> ValidationResult:
        dedicated = _DEDICATED_TYPES.get(expected)
        if dedicated is not None:
            return dedicated(value, context)
        return basic.type_of(expected)(value, context)

    def _check_bound(self, value: Any, bound: int | float, context: ValidationContext,
                     lower: bool) -> ValidationResult | None:
        """Length bound for strings and arrays, value bound for numbers, else no check."""
        if isinstance(value, (str, list, tuple)):
            factory = basic.min_length if lower else basic.max_length
            return factory(bound)(value, context)
        if is_number(value):
            factory = basic.min_value if lower else basic.max_value
            return factory(bound)(value, context)
        return None

    async def _check_items(self, record: ValidationResult, field_name: str, items: Sequence[Any],
                           rule: SchemaRule, context: ValidationContext) -> str | None:
        failures: list[tuple[int, str | None]] = []
        for index, item in enumerate(items):
            if await self._run_checks(record, f"{field_name}[{index}]", item, rule.items, context) is None:
                continue
            failures.append((index, record.message))
            if not self.options.report_all_items:
                break
            record.reset()

        if not failures:
            return None

        detail = "; ".join(f"Array item [{index}] is invalid: {message}" for index, message in failures)
        record.assign(
            False,
            rule.message or detail,
            ErrorCode.ARRAY_ITEM_INVALID,
            {"indices": [index for index, _ in failures]},
        )
        return "items"

    async def _run_custom(self, field_name: str, value: Any, validator: Callable[..., Any],
                          context: ValidationContext) -> ValidationResult:
        try:
            result = coerce_result(await settle(validator(value, context)))
        except Exception as exc:
            return report_rule_error(exc, Rule(validator, name=field_name), value, self.options.on_error)

        if isinstance(validator, Validator):
            detached = result.snapshot()
            validator.recycle(result)
            return detached
        return result


def create_schema_validator(schema: Mapping[str, FieldSpec], **options: Any) -> SchemaValidator:
    """Build a SchemaValidator from keyword options.

    Example:
        validator = create_schema_validator(schema, stop_on_first_error=True)
    """
    return SchemaValidator(schema, SchemaValidatorOptions(**options))
