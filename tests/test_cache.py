import pytest

from ruleflow.core.errors import CacheDestroyedError
from ruleflow.validation import CacheOptions, RuleCache, ValidationResult


def _cache(clock=None, **options) -> RuleCache:
    options.setdefault("enabled", True)
    if clock is None:
        return RuleCache(CacheOptions(**options))
    return RuleCache(CacheOptions(**options), clock=clock)


def test_get_set_roundtrip():
    cache = _cache()
    result = ValidationResult.fail("too short", "MIN_LENGTH")

    cache.set("k", result)

    assert cache.get("k") is result
    assert cache.has("k")
    assert cache.size == 1


def test_fifo_eviction_keeps_last_n_inserted():
    cache = _cache(max_size=3)
    for i in range(5):
        cache.set(f"k{i}", ValidationResult.ok())

    assert cache.keys() == ["k2", "k3", "k4"]
    assert cache.get("k0") is None
    assert cache.get("k1") is None


def test_eviction_ignores_read_recency():
    cache = _cache(max_size=2)
    cache.set("a", ValidationResult.ok())
    cache.set("b", ValidationResult.ok())

    # Reading "a" does not protect it: eviction is by insertion order
    assert cache.get("a") is not None
    cache.set("c", ValidationResult.ok())

    assert not cache.has("a")
    assert cache.has("b")
    assert cache.has("c")


def test_overwrite_keeps_insertion_position():
    cache = _cache(max_size=2)
    cache.set("a", ValidationResult.ok())
    cache.set("b", ValidationResult.ok())
    cache.set("a", ValidationResult.fail("changed"))
    cache.set("c", ValidationResult.ok())

    assert cache.keys() == ["b", "c"]


def test_ttl_expiry_is_lazy_and_shrinks_size(clock):
    cache = _cache(clock, ttl=10.0)
    cache.set("k", ValidationResult.ok())
    cache.set("other", ValidationResult.ok())

    clock.advance(9.9)
    assert cache.get("k") is not None

    clock.advance(0.1)
    assert cache.size == 2
    assert cache.get("k") is None
    assert cache.size == 1


def test_has_removes_expired_entries(clock):
    cache = _cache(clock, ttl=5.0)
    cache.set("k", ValidationResult.ok())
    clock.advance(5.0)

    assert not cache.has("k")
    assert cache.size == 0


def test_entries_without_ttl_never_expire(clock):
    cache = _cache(clock, ttl=None)
    cache.set("k", ValidationResult.ok())
    clock.advance(10_000)

    assert cache.get("k") is not None
    assert cache.clean_expired() == 0


def test_clean_expired_reports_count(clock):
    cache = _cache(clock, ttl=5.0)
    cache.set("old1", ValidationResult.ok())
    cache.set("old2", ValidationResult.ok())
    clock.advance(3.0)
    cache.set("fresh", ValidationResult.ok())
    clock.advance(2.0)

    assert cache.clean_expired() == 2
    assert cache.keys() == ["fresh"]


def test_hit_rate_after_miss_set_hit():
    cache = _cache()

    assert cache.get("k") is None
    cache.set("k", ValidationResult.ok())
    assert cache.get("k") is not None

    stats = cache.get_stats()
    assert stats.hits == 1
    assert stats.misses == 1
    assert stats.hit_rate == 50.0
    assert stats.hit_rate_display == "50.00%"


def test_has_does_not_count_statistics():
    cache = _cache()
    cache.set("k", ValidationResult.ok())
    cache.has("k")
    cache.has("missing")

    stats = cache.get_stats()
    assert (stats.hits, stats.misses) == (0, 0)


def test_disable_is_not_clear():
    cache = _cache()
    cache.set("k", ValidationResult.ok())

    cache.disable()
    assert cache.get("k") is None
    cache.set("other", ValidationResult.ok())
    assert cache.get_stats().misses == 0

    cache.enable()
    assert cache.get("k") is not None
    assert not cache.has("other")


def test_clear_resets_entries_and_statistics():
    cache = _cache()
    cache.set("k", ValidationResult.ok())
    cache.get("k")
    cache.get("missing")

    cache.clear()

    stats = cache.get_stats()
    assert stats.size == 0
    assert (stats.hits, stats.misses) == (0, 0)


def test_reset_stats_keeps_entries():
    cache = _cache()
    cache.set("k", ValidationResult.ok())
    cache.get("k")

    cache.reset_stats()

    assert cache.size == 1
    assert cache.get_stats().hits == 0


def test_delete_reports_presence():
    cache = _cache()
    cache.set("k", ValidationResult.ok())

    assert cache.delete("k") is True
    assert cache.delete("k") is False


def test_generate_key_depends_on_rule_and_params():
    cache = _cache()

    assert cache.generate_key("abc", "email") == cache.generate_key("abc", "email")
    assert cache.generate_key("abc", "email") != cache.generate_key("abc", "url")
    assert cache.generate_key("abc", "len", {"min": 1}) != cache.generate_key("abc", "len", {"min": 2})


def test_destroy_stops_sweeper_and_blocks_reuse():
    cache = _cache(ttl=1.0, auto_cleanup=True, cleanup_interval=0.05)
    assert cache.auto_cleanup_running
    cache.set("k", ValidationResult.ok())

    cache.destroy()

    assert not cache.auto_cleanup_running
    assert cache.size == 0
    with pytest.raises(CacheDestroyedError):
        cache.get("k")
    with pytest.raises(CacheDestroyedError):
        cache.set("k", ValidationResult.ok())


def test_auto_cleanup_requires_ttl():
    cache = _cache(auto_cleanup=True, ttl=None)
    assert not cache.auto_cleanup_running
    cache.destroy()


def test_options_reject_invalid_sizes():
    with pytest.raises(ValueError):
        CacheOptions(max_size=0)
    with pytest.raises(ValueError):
        CacheOptions(cleanup_interval=0)


def test_options_default_from_environment(monkeypatch):
    monkeypatch.setenv("RULEFLOW_CACHE_MAX_SIZE", "7")
    monkeypatch.setenv("RULEFLOW_CACHE_TTL_SECONDS", "2.5")

    options = CacheOptions()

    assert options.max_size == 7
    assert options.ttl == 2.5
