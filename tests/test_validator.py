import asyncio

import pytest

from ruleflow.core.errors import AsyncRuleError, ErrorCode, RuleflowError, RuleNotFoundError
from ruleflow.validation import (
    CacheOptions,
    PoolOptions,
    ResultPool,
    Rule,
    RuleCache,
    ValidationContext,
    ValidationResult,
    Validator,
    ValidatorOptions,
    create_default_registry,
    create_validator,
    email,
    min_length,
    required,
)


def _counting(verdict: bool = True, message: str = "nope", code: str = "COUNTED"):
    calls = []

    def check(value, context=None):
        calls.append(value)
        return ValidationResult(verdict, None if verdict else message, None if verdict else code)

    return check, calls


@pytest.mark.asyncio
async def test_min_length_failure_reports_code():
    validator = Validator().rule(min_length(8))

    result = await validator.validate("abc")

    assert result.valid is False
    assert result.code == ErrorCode.MIN_LENGTH
    assert result.code == "MIN_LENGTH"


@pytest.mark.asyncio
async def test_empty_chain_is_valid():
    result = await Validator().validate("anything")
    assert result.valid is True


@pytest.mark.asyncio
@pytest.mark.parametrize("empty", [None, ""])
async def test_required_short_circuits_regardless_of_order(empty):
    check, calls = _counting()
    validator = Validator().rule(check).rule(required, required=True)

    result = await validator.validate(empty)

    assert result.valid is False
    assert result.code == ErrorCode.REQUIRED
    assert result.message == "This field is required"
    assert calls == []


@pytest.mark.asyncio
async def test_required_uses_rule_message():
    validator = Validator().rule(required, required=True, message=lambda value, ctx: f"{ctx.label} is required")

    result = await validator.validate("", ValidationContext(label="Email"))

    assert result.message == "Email is required"


@pytest.mark.asyncio
async def test_empty_values_skip_non_required_rules():
    check, calls = _counting(verdict=False)
    validator = Validator().rule(check)

    assert (await validator.validate(None)).valid
    assert (await validator.validate("")).valid
    assert calls == []


@pytest.mark.asyncio
async def test_skip_empty_false_runs_predicate_on_empty():
    check, calls = _counting(verdict=False)
    validator = Validator().rule(check, skip_empty=False)

    result = await validator.validate("")

    assert result.valid is False
    assert calls == [""]


@pytest.mark.asyncio
async def test_stops_at_first_failure():
    first, first_calls = _counting(verdict=False, code="FIRST")
    second, second_calls = _counting(verdict=False, code="SECOND")
    validator = Validator().rule(first).rule(second)

    result = await validator.validate("x")

    assert result.code == "FIRST"
    assert first_calls == ["x"]
    assert second_calls == []


@pytest.mark.asyncio
async def test_unnamed_rules_never_touch_cache(spy_cache):
    check, _ = _counting()
    validator = Validator(ValidatorOptions(cache_instance=spy_cache)).rule(check)

    await validator.validate("a")
    validator.validate_sync("b")

    assert spy_cache.get_calls == 0
    assert spy_cache.set_calls == 0


@pytest.mark.asyncio
async def test_repeat_validation_hits_cache():
    check, calls = _counting(verdict=False)
    cache = RuleCache(CacheOptions(enabled=True))
    validator = Validator(ValidatorOptions(cache_instance=cache)).rule(check, name="counted")

    first = await validator.validate("value")
    second = await validator.validate("value")

    assert first == second
    assert calls == ["value"]
    stats = validator.get_cache_stats()
    assert (stats.hits, stats.misses) == (1, 1)


@pytest.mark.asyncio
async def test_required_check_ignores_cache(spy_cache):
    validator = Validator(ValidatorOptions(cache_instance=spy_cache)).rule(required, name="required", required=True)

    await validator.validate("")

    assert spy_cache.get_calls == 0


@pytest.mark.asyncio
async def test_rule_message_overrides_on_cache_hit():
    check, _ = _counting(verdict=False, message="predicate message")
    messages = iter(["first", "second"])
    validator = Validator(ValidatorOptions(cache=True)).rule(
        check, name="counted", message=lambda value, ctx: next(messages)
    )

    first = await validator.validate("v")
    second = await validator.validate("v")

    assert first.message == "first"
    assert second.message == "second"
    assert validator.get_cache_stats().hits == 1


@pytest.mark.asyncio
async def test_predicate_exception_becomes_rule_error():
    seen = []

    def explode(value, context=None):
        raise RuntimeError("boom")

    validator = Validator(ValidatorOptions(on_error=lambda exc, rule, value: seen.append((str(exc), value)))).rule(explode)

    result = await validator.validate("test")

    assert result.valid is False
    assert result.code == ErrorCode.RULE_ERROR
    assert result.meta == {"error": "boom"}
    assert seen == [("boom", "test")]


@pytest.mark.asyncio
async def test_async_rejection_becomes_rule_error():
    async def explode(value, context=None):
        await asyncio.sleep(0)
        raise ValueError("async boom")

    result = await Validator().rule(explode).validate("x")

    assert result.code == ErrorCode.RULE_ERROR
    assert result.meta == {"error": "async boom"}


@pytest.mark.asyncio
async def test_failing_error_hook_does_not_change_result():
    def explode(value, context=None):
        raise RuntimeError("boom")

    def broken_hook(exc, rule, value):
        raise LookupError("hook failed")

    result = await Validator(ValidatorOptions(on_error=broken_hook)).rule(explode).validate("x")

    assert result.code == ErrorCode.RULE_ERROR


@pytest.mark.asyncio
async def test_rule_errors_are_cached():
    calls = []

    def explode(value, context=None):
        calls.append(value)
        raise RuntimeError("boom")

    validator = Validator(ValidatorOptions(cache=True)).rule(explode, name="explode")

    await validator.validate("x")
    result = await validator.validate("x")

    assert result.code == ErrorCode.RULE_ERROR
    assert calls == ["x"]


def test_unsupported_return_type_is_contained():
    result = Validator().rule(lambda value, ctx: 42).validate_sync("x")

    assert result.code == ErrorCode.RULE_ERROR


@pytest.mark.asyncio
async def test_predicates_may_return_bool_or_mapping():
    validator = (
        Validator()
        .rule(lambda value, ctx: True)
        .rule(lambda value, ctx: {"valid": False, "message": "mapped", "code": "MAPPED"})
    )

    result = await validator.validate("x")

    assert (result.valid, result.message, result.code) == (False, "mapped", "MAPPED")


@pytest.mark.asyncio
async def test_async_predicates_are_awaited():
    async def slow_ok(value, context=None):
        await asyncio.sleep(0)
        return ValidationResult.fail("slow", "SLOW")

    result = await Validator().rule(slow_ok).validate("x")

    assert result.code == "SLOW"


def test_validate_sync_rejects_async_rule():
    async def async_rule(value, context=None):
        return ValidationResult.ok()

    validator = Validator().rule(async_rule, name="async-rule")

    with pytest.raises(AsyncRuleError) as info:
        validator.validate_sync("test")

    assert info.value.rule_name == "async-rule"
    assert "async-rule" in str(info.value)


def test_validate_sync_runs_sync_chain():
    validator = Validator().rule(email).rule(min_length(5))

    assert validator.validate_sync("a@b.co").valid
    assert validator.validate_sync("nope").code == ErrorCode.INVALID_EMAIL


@pytest.mark.asyncio
async def test_batch_and_parallel_agree():
    validator = Validator().rule(min_length(3))
    values = ["abcd", "ab", "abc", "a"]

    sequential = await validator.validate_batch(values)
    parallel = await validator.validate_parallel(values, max_concurrent=2)

    assert sequential.valid is False
    assert [item.value for item in sequential.failures] == ["ab", "a"]
    assert [item.result for item in sequential.results] == [item.result for item in parallel.results]
    assert [item.value for item in parallel.results] == values
    assert parallel.failure_count == 2


@pytest.mark.asyncio
async def test_batch_of_valid_values_is_valid():
    result = await Validator().rule(min_length(1)).validate_batch(["a", "b"])
    assert result.valid and result.failure_count == 0


@pytest.mark.asyncio
async def test_rule_from_registry_name_is_cached_under_that_name():
    validator = Validator(ValidatorOptions(cache=True), registry=create_default_registry()).rule("email")

    assert (await validator.validate("not-an-email")).code == ErrorCode.INVALID_EMAIL
    await validator.validate("not-an-email")

    assert validator.get_cache_stats().hits == 1


def test_rule_name_without_registry_is_an_error():
    with pytest.raises(RuleflowError):
        Validator().rule("email")


def test_unknown_registry_name_raises():
    with pytest.raises(RuleNotFoundError):
        Validator(registry=create_default_registry()).rule("does-not-exist")


def test_rule_object_with_keyword_overrides():
    base = Rule(min_length(3), name="min3")
    validator = Validator().rule(base, message="custom")

    result = validator.validate_sync("ab")

    assert result.message == "custom"
    assert validator.rule_count == 1


def test_non_callable_rule_is_rejected():
    with pytest.raises(TypeError):
        Validator().rule(42)


@pytest.mark.asyncio
async def test_pooled_results_come_from_pool_and_can_be_recycled():
    pool = ResultPool(PoolOptions(initial_size=0, max_size=10, enabled=True))
    validator = Validator(ValidatorOptions(pool_instance=pool)).rule(min_length(3))

    result = await validator.validate("ab")
    assert result.code == ErrorCode.MIN_LENGTH
    validator.recycle(result)

    stats = validator.get_pool_stats()
    assert stats.acquired == 1
    assert stats.released == 1
    assert pool.size == 1


@pytest.mark.asyncio
async def test_cached_entries_survive_result_recycling():
    validator = Validator(ValidatorOptions(cache=True, pool=True)).rule(min_length(3), name="min3")

    first = await validator.validate("ab")
    validator.recycle(first)
    second = await validator.validate("ab")

    assert second.code == ErrorCode.MIN_LENGTH
    assert second.valid is False


@pytest.mark.asyncio
async def test_is_valid_recycles_into_pool():
    validator = Validator(ValidatorOptions(pool=True)).rule(min_length(3))

    assert await validator.is_valid("abcd") is True
    assert validator.is_valid_sync("ab") is False
    assert validator.get_pool_stats().released == 2


@pytest.mark.asyncio
async def test_validator_is_an_async_predicate():
    inner = Validator().rule(min_length(3))
    outer = Validator().rule(inner, name="inner")

    result = await outer.validate("ab")

    assert result.code == ErrorCode.MIN_LENGTH


def test_clear_cache_and_stats_without_cache():
    validator = Validator()

    validator.clear_cache()

    assert validator.get_cache_stats() is None
    assert validator.get_pool_stats() is None


def test_create_validator_accepts_keyword_options():
    validator = create_validator(cache=True, stop_on_first_error=False)

    assert validator.cache is not None
    assert validator.options.stop_on_first_error is False
