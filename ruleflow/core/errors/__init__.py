"""Error Handling

- ErrorCode: code taxonomy carried by every failing ValidationResult
- Ok/Err: fallible values for coercions
- RuleflowError hierarchy: caller programming errors (never validation outcomes)
"""
from .types import (
    ErrorCode,
    Result,
    Ok,
    Err,
    try_result,
)

from .exceptions import (
    RuleflowError,
    AsyncRuleError,
    CacheDestroyedError,
    RuleNotFoundError,
    UnknownTransformError,
)

__all__ = [
    "ErrorCode",
    "Result",
    "Ok",
    "Err",
    "try_result",
    "RuleflowError",
    "AsyncRuleError",
    "CacheDestroyedError",
    "RuleNotFoundError",
    "UnknownTransformError",
]
