"""Result and Context Records

ValidationResult is the record every rule invocation produces. It is a mutable
slotted dataclass so the ResultPool can reset and reuse instances; results that
do not come from a pool are treated as immutable by convention.
"""
from __future__ import annotations

from dataclasses import dataclass, field as dc_field, replace
from types import MappingProxyType
from typing import Any, Generic, Mapping, TypeVar

from ruleflow.core.errors import ErrorCode

T = TypeVar("T")

EMPTY_FORM_DATA: Mapping[str, Any] = MappingProxyType({})


@dataclass(slots=True)
class ValidationResult:
    """Outcome of one rule evaluation."""
    valid: bool = False
    message: str | None = None
    code: ErrorCode | str | None = None
    meta: Any = None

    @classmethod
    def ok(cls, **meta: Any) -> ValidationResult:
        return cls(valid=True, meta=meta or None)

    @classmethod
    def fail(cls, message: str | None = None, code: ErrorCode | str | None = None, meta: Any = None) -> ValidationResult:
        return cls(valid=False, message=message, code=code, meta=meta)

    def assign(self, valid: bool, message: str | None = None, code: ErrorCode | str | None = None,
               meta: Any = None) -> ValidationResult:
        """Overwrite every field in place. Used on pooled records."""
        self.valid, self.message, self.code, self.meta = valid, message, code, meta
        return self

    def reset(self) -> None:
        self.assign(False)

    def snapshot(self) -> ValidationResult:
        """Detached copy, safe to store while the original is recycled."""
        return ValidationResult(self.valid, self.message, self.code, self.meta)

    def to_dict(self) -> dict[str, Any]:
        """Serialize, omitting unset fields."""
        if self.valid and self.meta is None:
            return {"valid": True}
        data: dict[str, Any] = {"valid": self.valid}
        if self.message is not None: data["message"] = self.message
        if self.code is not None: data["code"] = str(self.code)
        if self.meta is not None: data["meta"] = self.meta
        return data


@dataclass(frozen=True, slots=True)
class ValidationContext:
    """Per-call ambient data visible to predicates.

    form_data is exposed read-only; predicates look up sibling values through it.
    """
    field: str | None = None
    label: str | None = None
    form_data: Mapping[str, Any] = dc_field(default_factory=lambda: EMPTY_FORM_DATA)
    params: Any = None

    def __post_init__(self) -> None:
        if not isinstance(self.form_data, MappingProxyType):
            object.__setattr__(self, "form_data", MappingProxyType(dict(self.form_data or {})))

    def for_field(self, field_name: str, form_data: Mapping[str, Any] | None = None) -> ValidationContext:
        """Derive a context scoped to one field of a record."""
        if form_data is None:
            return replace(self, field=field_name)
        return replace(self, field=field_name, form_data=MappingProxyType(form_data))


@dataclass(frozen=True, slots=True)
class ValidationError:
    """One field-level failure in a schema validation."""
    field: str
    message: str
    code: ErrorCode | str | None = None
    rule: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"field": self.field, "message": self.message}
        if self.code is not None: data["code"] = str(self.code)
        if self.rule is not None: data["rule"] = self.rule
        return data


@dataclass(frozen=True)
class SchemaValidationResult:
    """Aggregate outcome of validating a record against a schema.

    errors and error_map are built together and always agree.
    """
    valid: bool
    errors: tuple[ValidationError, ...] = ()
    error_map: Mapping[str, tuple[ValidationError, ...]] = dc_field(default_factory=dict)

    @classmethod
    def from_errors(cls, errors: list[ValidationError]) -> SchemaValidationResult:
        grouped: dict[str, list[ValidationError]] = {}
        for error in errors:
            grouped.setdefault(error.field, []).append(error)
        return cls(
            valid=not errors,
            errors=tuple(errors),
            error_map=MappingProxyType({name: tuple(items) for name, items in grouped.items()}),
        )

    def errors_for(self, field_name: str) -> tuple[ValidationError, ...]:
        return self.error_map.get(field_name, ())

    @property
    def first_error(self) -> ValidationError | None:
        return self.errors[0] if self.errors else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [e.to_dict() for e in self.errors],
            "error_map": {name: [e.to_dict() for e in items] for name, items in self.error_map.items()},
        }


@dataclass(frozen=True, slots=True)
class BatchItem(Generic[T]):
    """One value of a batch with its result."""
    value: T
    result: ValidationResult


@dataclass(frozen=True)
class BatchValidationResult(Generic[T]):
    """Outcome of validating many values against one chain."""
    valid: bool
    results: tuple[BatchItem[T], ...]
    failures: tuple[BatchItem[T], ...]

    @classmethod
    def from_items(cls, items: list[BatchItem[T]]) -> BatchValidationResult[T]:
        failures = tuple(item for item in items if not item.result.valid)
        return cls(valid=not failures, results=tuple(items), failures=failures)

    @property
    def failure_count(self) -> int:
        return len(self.failures)
