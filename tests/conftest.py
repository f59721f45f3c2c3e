"""
Pytest configuration and shared fixtures for ruleflow tests.
"""

import pytest

from ruleflow.core.config import get_settings
from ruleflow.validation import RuleCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SpyCache(RuleCache):
    """RuleCache that counts get/set calls."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.get_calls = 0
        self.set_calls = 0

    def get(self, key):
        self.get_calls += 1
        return super().get(key)

    def set(self, key, value):
        self.set_calls += 1
        super().set(key, value)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are lru_cached; drop them so env overrides apply per test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def spy_cache():
    return SpyCache()
