"""Validation Engine

Rules are plain predicates ``(value, context) -> ValidationResult`` that may
return an awaitable instead. Executors decide caching, pooling, required-ness
and error containment; predicates only judge a value.

Key Features:
- Rule-chain executor with sync and async entry points
- FIFO result cache with TTL and hit/miss statistics
- Result record pool
- Cross-field rules and logical combinators
- Schema executor with defaults, transforms and array items
- Explicit rule registry and shared resources (no global singletons)

Usage:
    from ruleflow.validation import (
        Validator, ValidatorOptions, SchemaValidator,
        min_length, match_field, create_default_registry,
    )

    password = Validator(ValidatorOptions(cache=True)).rule(min_length(8), name="min_length:8", required=True)
    result = await password.validate("hunter2")
    if not result.valid:
        print(result.code, result.message)
"""

# Records
from .types import (
    ValidationResult,
    ValidationContext,
    ValidationError,
    SchemaValidationResult,
    BatchItem,
    BatchValidationResult,
)

# Rule contract
from .contract import (
    Rule,
    Predicate,
    Outcome,
    is_empty,
    coerce_result,
)

# Infrastructure
from .hashing import fast_hash
from .cache import RuleCache, CacheOptions, CacheStats
from .pool import ResultPool, PoolOptions, PoolStats
from .registry import RuleRegistry, RegistryStats, create_default_registry

# Executors
from .validator import (
    Validator,
    ValidatorOptions,
    create_validator,
)
from .schema import (
    SchemaRule,
    SchemaValidator,
    SchemaValidatorOptions,
    create_schema_validator,
)
from .resources import SharedResources
from .composer import (
    RuleComposer,
    compose,
    email_validator,
    username_validator,
    url_validator,
    PRESETS,
)

# Transforms
from .transforms import (
    Transformer,
    compile_transform,
    get_transform,
    BUILTIN_TRANSFORMS,
)

# Rules
from .rules import (
    required,
    min_length,
    max_length,
    min_value,
    max_value,
    value_range,
    pattern,
    one_of,
    array_length,
    type_of,
    email,
    url,
    numeric,
    integer,
    date,
    get_field_value,
    match_field,
    greater_than,
    less_than,
    after_date,
    before_date,
    required_if,
    excludes_with,
    and_,
    or_,
    not_,
    when,
    conditional,
    ConditionalRoute,
    ref,
    custom,
    lazy,
)

__all__ = [
    # Records
    "ValidationResult",
    "ValidationContext",
    "ValidationError",
    "SchemaValidationResult",
    "BatchItem",
    "BatchValidationResult",
    # Rule contract
    "Rule",
    "Predicate",
    "Outcome",
    "is_empty",
    "coerce_result",
    # Infrastructure
    "fast_hash",
    "RuleCache",
    "CacheOptions",
    "CacheStats",
    "ResultPool",
    "PoolOptions",
    "PoolStats",
    "RuleRegistry",
    "RegistryStats",
    "create_default_registry",
    # Executors
    "Validator",
    "ValidatorOptions",
    "create_validator",
    "SchemaRule",
    "SchemaValidator",
    "SchemaValidatorOptions",
    "create_schema_validator",
    "SharedResources",
    "RuleComposer",
    "compose",
    "email_validator",
    "username_validator",
    "url_validator",
    "PRESETS",
    # Transforms
    "Transformer",
    "compile_transform",
    "get_transform",
    "BUILTIN_TRANSFORMS",
    # Rules
    "required",
    "min_length",
    "max_length",
    "min_value",
    "max_value",
    "value_range",
    "pattern",
    "one_of",
    "array_length",
    "type_of",
    "email",
    "url",
    "numeric",
    "integer",
    "date",
    "get_field_value",
    "match_field",
    "greater_than",
    "less_than",
    "after_date",
    "before_date",
    "required_if",
    "excludes_with",
    "and_",
    "or_",
    "not_",
    "when",
    "conditional",
    "ConditionalRoute",
    "ref",
    "custom",
    "lazy",
]
