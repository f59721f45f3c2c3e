"""Rule-Chain Executor

Runs an ordered list of rules against one value and returns the first failure,
or a valid result when every rule passes.

Per rule, in insertion order:
1. required + empty value -> REQUIRED, before any cache lookup
2. empty value -> skip (unless the rule sets skip_empty=False)
3. named rule + cache -> look up hash(value, rule name)
4. miss -> run the predicate; exceptions become RULE_ERROR results
5. failure -> apply the rule-level message and stop

Usage:
    validator = (
        Validator(ValidatorOptions(cache=True))
        .rule(required, required=True)
        .rule(min_length(8), name="min_length:8")
    )
    result = await validator.validate("hunter2")
"""
from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Generic, Iterable, TypeVar

from ruleflow.core.errors import AsyncRuleError, ErrorCode, RuleflowError
from ruleflow.core.logging import engine_logger

from .cache import CacheOptions, CacheStats, RuleCache
from .contract import MessageSpec, Outcome, Predicate, Rule, coerce_result, is_empty, resolve_message, settle
from .pool import PoolOptions, PoolStats, ResultPool
from .registry import RuleRegistry
from .types import BatchItem, BatchValidationResult, ValidationContext, ValidationResult

T = TypeVar("T")

log = engine_logger()

ErrorHook = Callable[[BaseException, Rule, Any], None]

REQUIRED_MESSAGE = "This field is required"
RULE_ERROR_MESSAGE = "Validation rule raised an error"


@dataclass(frozen=True, slots=True)
class ValidatorOptions:
    """Chain executor configuration.

    Passing cache_instance or pool_instance implies the matching flag. A cache
    or pool built here belongs to this validator alone; share one across
    validators by passing an instance.
    """
    cache: bool = False
    cache_instance: RuleCache | None = None
    pool: bool = False
    pool_instance: ResultPool | None = None
    stop_on_first_error: bool = True
    on_error: ErrorHook | None = None


def report_rule_error(exc: BaseException, rule: Rule, value: Any, hook: ErrorHook | None) -> ValidationResult:
    """Contain a predicate exception as a RULE_ERROR result.

    The hook is observability only; a failing hook is logged and ignored.
    """
    log.warning("rule_error", rule=rule.name, error=str(exc), error_type=type(exc).__name__)
    if hook is not None:
        try:
            hook(exc, rule, value)
        except Exception:
            log.exception("on_error_hook_failed", rule=rule.name)
    return ValidationResult.fail(RULE_ERROR_MESSAGE, ErrorCode.RULE_ERROR, {"error": str(exc)})


def _discard(pending: Any) -> None:
    """Release an awaitable that will never be awaited."""
    if inspect.iscoroutine(pending):
        pending.close()
    elif isinstance(pending, asyncio.Future):
        pending.cancel()


class Validator(Generic[T]):
    """Ordered chain of rules applied to a single value."""

    def __init__(self, options: ValidatorOptions | None = None, registry: RuleRegistry | None = None):
        self.options = options or ValidatorOptions()
        self._rules: list[Rule] = []
        self._registry = registry

        self._cache: RuleCache | None = None
        if self.options.cache_instance is not None:
            self._cache = self.options.cache_instance
        elif self.options.cache:
            self._cache = RuleCache(CacheOptions())

        self._pool: ResultPool | None = None
        if self.options.pool_instance is not None:
            self._pool = self.options.pool_instance
        elif self.options.pool:
            self._pool = ResultPool(PoolOptions())

    # =========================================================================
    # Chain building
    # =========================================================================

    def rule(
        self,
        rule: Rule | Predicate | str,
        *,
        name: str | None = None,
        message: MessageSpec = None,
        required: bool | None = None,
        skip_empty: bool | None = None,
    ) -> Validator[T]:
        """Append a rule. Accepts a Rule, a bare predicate or a registry name.

        Keyword metadata overrides what the Rule already carries. A registry
        name doubles as the cache identity unless ``name`` is given.
        """
        if isinstance(rule, str):
            if self._registry is None:
                raise RuleflowError(f'Cannot resolve rule "{rule}": validator has no registry')
            rule = Rule(self._registry.require(rule), name=name or rule)
        elif not isinstance(rule, Rule):
            if not callable(rule):
                raise TypeError(f"Expected Rule, predicate or rule name, got {type(rule).__name__}")
            rule = Rule(rule)

        overrides: dict[str, Any] = {}
        if name is not None: overrides["name"] = name
        if message is not None: overrides["message"] = message
        if required is not None: overrides["required"] = required
        if skip_empty is not None: overrides["skip_empty"] = skip_empty
        self._rules.append(replace(rule, **overrides) if overrides else rule)
        return self

    def rules(self, rules: Iterable[Rule | Predicate | str]) -> Validator[T]:
        for item in rules:
            self.rule(item)
        return self

    @property
    def rule_count(self) -> int:
        return len(self._rules)

    @property
    def cache(self) -> RuleCache | None:
        return self._cache

    @property
    def pool(self) -> ResultPool | None:
        return self._pool

    # =========================================================================
    # Execution
    # =========================================================================

    async def validate(self, value: T, context: ValidationContext | None = None) -> ValidationResult:
        """Run the chain, awaiting asynchronous predicates in place."""
        for rule in self._rules:
            failure = await settle(self._check(rule, value, context, sync=False))
            if failure is not None:
                return failure
        return self._emit(True)

    def validate_sync(self, value: T, context: ValidationContext | None = None) -> ValidationResult:
        """Run the chain without suspending.

        Raises AsyncRuleError when a predicate returns an awaitable.
        """
        for rule in self._rules:
            failure = self._check(rule, value, context, sync=True)
            if failure is not None:
                return failure
        return self._emit(True)

    async def __call__(self, value: T, context: ValidationContext | None = None) -> ValidationResult:
        return await self.validate(value, context)

    async def is_valid(self, value: T, context: ValidationContext | None = None) -> bool:
        result = await self.validate(value, context)
        verdict = result.valid
        self.recycle(result)
        return verdict

    def is_valid_sync(self, value: T, context: ValidationContext | None = None) -> bool:
        result = self.validate_sync(value, context)
        verdict = result.valid
        self.recycle(result)
        return verdict

    async def validate_batch(self, values: Iterable[T], context: ValidationContext | None = None) -> BatchValidationResult[T]:
        """Validate values one after another; cache writes are visible to later items."""
        items: list[BatchItem[T]] = []
        for value in values:
            items.append(BatchItem(value, await self.validate(value, context)))
        return BatchValidationResult.from_items(items)

    async def validate_parallel(
        self,
        values: Iterable[T],
        context: ValidationContext | None = None,
        max_concurrent: int | None = None,
    ) -> BatchValidationResult[T]:
        """Validate values concurrently. Reported order matches input order."""
        semaphore = asyncio.Semaphore(max_concurrent) if max_concurrent else None

        async def run_one(value: T) -> BatchItem[T]:
            if semaphore is None:
                return BatchItem(value, await self.validate(value, context))
            async with semaphore:
                return BatchItem(value, await self.validate(value, context))

        items = await asyncio.gather(*(run_one(value) for value in values))
        return BatchValidationResult.from_items(list(items))

    # =========================================================================
    # Per-rule evaluation
    # =========================================================================

    def _check(self, rule: Rule, value: Any, context: ValidationContext | None, *, sync: bool) -> Outcome | None:
        """Evaluate one rule. Returns None when it passes, else the final failure."""
        if rule.required and is_empty(value):
            message = resolve_message(rule.message, value, context) or REQUIRED_MESSAGE
            return self._emit(False, message, ErrorCode.REQUIRED)

        if is_empty(value) and rule.skip_empty:
            return None

        key: str | None = None
        if self._cache is not None and rule.name:
            key = self._cache.generate_key(value, rule.name)
            cached = self._cache.get(key)
            if cached is not None:
                return self._finish(rule, cached, value, context)

        try:
            raw = rule.validator(value, context)
        except Exception as exc:
            return self._store(rule, key, report_rule_error(exc, rule, value, self.options.on_error), value, context)

        if inspect.isawaitable(raw):
            if sync:
                _discard(raw)
                raise AsyncRuleError(rule.name)
            return self._await_predicate(rule, key, raw, value, context)

        return self._store(rule, key, self._normalize(raw, rule, value), value, context)

    async def _await_predicate(
        self,
        rule: Rule,
        key: str | None,
        pending: Awaitable[Any],
        value: Any,
        context: ValidationContext | None,
    ) -> ValidationResult | None:
        try:
            raw = await pending
        except Exception as exc:
            return self._store(rule, key, report_rule_error(exc, rule, value, self.options.on_error), value, context)
        return self._store(rule, key, self._normalize(raw, rule, value), value, context)

    def _normalize(self, raw: Any, rule: Rule, value: Any) -> ValidationResult:
        try:
            return coerce_result(raw)
        except TypeError as exc:
            return report_rule_error(exc, rule, value, self.options.on_error)

    def _store(
        self,
        rule: Rule,
        key: str | None,
        result: ValidationResult,
        value: Any,
        context: ValidationContext | None,
    ) -> ValidationResult | None:
        if key is not None and self._cache is not None:
            self._cache.set(key, result.snapshot())
        return self._finish(rule, result, value, context)

    def _finish(
        self,
        rule: Rule,
        result: ValidationResult,
        value: Any,
        context: ValidationContext | None,
    ) -> ValidationResult | None:
        """Turn a predicate result into the chain's answer for this rule.

        The rule-level message is resolved on every failure, cached or not.
        """
        if result.valid:
            return None
        message = result.message
        if rule.message is not None:
            message = resolve_message(rule.message, value, context)
        return self._emit(False, message, result.code, result.meta)

    def _emit(self, valid: bool, message: str | None = None, code: Any = None, meta: Any = None) -> ValidationResult:
        if self._pool is None:
            return ValidationResult(valid, message, code, meta)
        return self._pool.acquire().assign(valid, message, code, meta)

    # =========================================================================
    # Resources
    # =========================================================================

    def recycle(self, result: ValidationResult) -> None:
        """Return a result obtained from this validator to its pool.

        The caller must not use the record afterwards. No-op without a pool.
        """
        if self._pool is not None:
            self._pool.release(result)

    def clear_cache(self) -> None:
        if self._cache is not None:
            self._cache.clear()

    def get_cache_stats(self) -> CacheStats | None:
        return self._cache.get_stats() if self._cache is not None else None

    def get_pool_stats(self) -> PoolStats | None:
        return self._pool.get_stats() if self._pool is not None else None


def create_validator(registry: RuleRegistry | None = None, **options: Any) -> Validator[Any]:
    """Build a Validator from keyword options.

    Example:
        validator = create_validator(cache=True, on_error=report)
    """
    return Validator(ValidatorOptions(**options), registry=registry)
