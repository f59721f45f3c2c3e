"""Engine exceptions.

Validation failures never raise. These exceptions signal caller programming
errors: misuse of the synchronous entry point, use of a destroyed cache,
unknown registry names and unknown transform names.
"""
from __future__ import annotations


class RuleflowError(Exception):
    """Base class for all engine exceptions."""


class AsyncRuleError(RuleflowError):
    """An asynchronous predicate was reached through a synchronous entry point."""

    def __init__(self, rule_name: str | None):
        self.rule_name = rule_name
        label = rule_name or "<anonymous>"
        super().__init__(f'Rule "{label}" is async, use validate() instead of validate_sync()')


class CacheDestroyedError(RuleflowError):
    """A cache was used after destroy()."""

    def __init__(self) -> None:
        super().__init__("Cache has been destroyed and cannot be reused")


class RuleNotFoundError(RuleflowError, KeyError):
    """A rule name is not present in the registry."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Rule "{name}" is not registered')

    def __str__(self) -> str:
        return self.args[0]


class UnknownTransformError(RuleflowError, ValueError):
    """A schema names a transform that does not exist."""

    def __init__(self, name: str, known: list[str]):
        self.name = name
        super().__init__(f'Unknown transform "{name}"; known transforms: {", ".join(sorted(known))}')
