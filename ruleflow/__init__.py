"""ruleflow: rule-chain and schema validation engine."""

from ruleflow.core.errors import (
    ErrorCode,
    RuleflowError,
    AsyncRuleError,
    CacheDestroyedError,
    RuleNotFoundError,
    UnknownTransformError,
)
from ruleflow.validation import *  # noqa: F401,F403
from ruleflow.validation import __all__ as _validation_all

__version__ = "0.1.0"

__all__ = [
    "ErrorCode",
    "RuleflowError",
    "AsyncRuleError",
    "CacheDestroyedError",
    "RuleNotFoundError",
    "UnknownTransformError",
    *_validation_all,
]
