import pytest

from ruleflow.validation import PoolOptions, ResultPool, ValidationResult


def test_prefills_initial_size():
    pool = ResultPool(PoolOptions(initial_size=5, max_size=10, enabled=True))

    assert pool.size == 5
    assert pool.get_stats().created == 5


def test_initial_size_is_clamped_to_max_size():
    pool = ResultPool(PoolOptions(initial_size=50, max_size=4, enabled=True))

    assert pool.size == 4


def test_acquire_never_fails_on_empty_pool():
    pool = ResultPool(PoolOptions(initial_size=0, max_size=2, enabled=True))

    first, second, third = pool.acquire(), pool.acquire(), pool.acquire()

    assert len({id(first), id(second), id(third)}) == 3
    assert pool.get_stats().created == 3


def test_release_resets_fields():
    pool = ResultPool(PoolOptions(initial_size=0, max_size=2, enabled=True))
    record = pool.acquire()
    record.assign(True, "msg", "CODE", {"x": 1})

    pool.release(record)
    reused = pool.acquire()

    assert reused is record
    assert reused == ValidationResult()


def test_release_beyond_max_size_drops_records():
    pool = ResultPool(PoolOptions(initial_size=0, max_size=3, enabled=True))

    pool.release_many(ValidationResult(valid=True) for _ in range(3 + 4))

    assert pool.size == 3
    assert pool.get_stats().released == 7


def test_reuse_rate():
    pool = ResultPool(PoolOptions(initial_size=1, max_size=5, enabled=True))

    pool.acquire()  # reused from prefill
    pool.acquire()  # created

    stats = pool.get_stats()
    assert stats.acquired == 2
    assert stats.reused == 1
    assert stats.reuse_rate == 50.0


def test_disabled_pool_creates_fresh_and_keeps_no_books():
    pool = ResultPool(PoolOptions(initial_size=3, max_size=5, enabled=False))

    record = pool.acquire()
    pool.release(record)

    stats = pool.get_stats()
    assert pool.size == 0
    assert (stats.created, stats.acquired, stats.released) == (0, 0, 0)


def test_clear_empties_free_list():
    pool = ResultPool(PoolOptions(initial_size=3, max_size=5, enabled=True))
    pool.acquire()

    pool.clear()

    stats = pool.get_stats()
    assert pool.size == 0
    assert (stats.acquired, stats.released, stats.reused) == (0, 0, 0)


def test_reset_stats_clears_every_counter():
    pool = ResultPool(PoolOptions(initial_size=2, max_size=5, enabled=True))
    pool.release(pool.acquire())

    pool.reset_stats()

    stats = pool.get_stats()
    assert (stats.created, stats.acquired, stats.released, stats.reused) == (0, 0, 0, 0)
    assert pool.size == 2


def test_options_reject_negative_sizes():
    with pytest.raises(ValueError):
        PoolOptions(max_size=-1)
