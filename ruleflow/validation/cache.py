"""Result Cache

Bounded key -> ValidationResult store with optional per-entry expiry.

Eviction is first-in-first-out: when full, the earliest-inserted key goes,
regardless of how recently it was read. Reads never reorder entries.
Expired entries disappear lazily on get/has and in bulk via clean_expired(),
which an optional daemon thread runs on a fixed interval.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable

from ruleflow.core.config import get_settings
from ruleflow.core.errors import CacheDestroyedError
from ruleflow.core.logging import cache_logger

from .hashing import fast_hash
from .types import ValidationResult

log = cache_logger()


@dataclass(frozen=True, slots=True)
class CacheOptions:
    """Configuration for a RuleCache. Defaults come from Settings."""
    max_size: int = field(default_factory=lambda: get_settings().CACHE_MAX_SIZE)
    ttl: float | None = field(default_factory=lambda: get_settings().CACHE_TTL_SECONDS)
    enabled: bool = field(default_factory=lambda: get_settings().CACHE_ENABLED)
    auto_cleanup: bool = field(default_factory=lambda: get_settings().CACHE_AUTO_CLEANUP)
    cleanup_interval: float = field(default_factory=lambda: get_settings().CACHE_CLEANUP_INTERVAL_SECONDS)

    def __post_init__(self) -> None:
        if self.max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {self.max_size}")
        if self.cleanup_interval <= 0:
            raise ValueError(f"cleanup_interval must be positive, got {self.cleanup_interval}")


@dataclass(slots=True)
class CacheEntry:
    value: ValidationResult
    expire_at: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expire_at is not None and self.expire_at <= now


@dataclass(frozen=True, slots=True)
class CacheStats:
    """Point-in-time cache statistics."""
    size: int
    max_size: int
    hits: int
    misses: int
    hit_rate: float  # percentage, 0-100
    enabled: bool

    @property
    def hit_rate_display(self) -> str:
        return f"{self.hit_rate:.2f}%"


class RuleCache:
    """FIFO-bounded result cache with optional TTL.

    All mutation happens under a per-instance lock, so one cache may be shared
    by validators running on different threads.

    Usage:
        cache = RuleCache(CacheOptions(max_size=500, ttl=30.0))
        key = cache.generate_key("user@example.com", "email")
        if (hit := cache.get(key)) is None:
            cache.set(key, email_rule(value))
    """

    def __init__(self, options: CacheOptions | None = None, *, clock: Callable[[], float] = time.monotonic):
        self.options = options or CacheOptions()
        self._entries: dict[str, CacheEntry] = {}
        self._enabled = self.options.enabled
        self._hits = 0
        self._misses = 0
        self._clock = clock
        self._lock = threading.RLock()
        self._destroyed = False
        self._stop_sweep = threading.Event()
        self._sweeper: threading.Thread | None = None
        if self.options.auto_cleanup and self.options.ttl:
            self._start_sweeper()

    @property
    def max_size(self) -> int:
        return self.options.max_size

    @property
    def ttl(self) -> float | None:
        return self.options.ttl

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def _check_alive(self) -> None:
        if self._destroyed:
            raise CacheDestroyedError()

    def get(self, key: str) -> ValidationResult | None:
        """Return the cached result, or None on miss or expiry."""
        self._check_alive()
        if not self._enabled:
            return None

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                self._misses += 1
                return None
            self._hits += 1
            return entry.value

    def set(self, key: str, value: ValidationResult) -> None:
        """Store a result, evicting the oldest-inserted entry when full."""
        self._check_alive()
        if not self._enabled:
            return

        expire_at = self._clock() + self.options.ttl if self.options.ttl else None
        with self._lock:
            if key in self._entries:
                # Re-setting a key keeps its original insertion position
                self._entries[key] = CacheEntry(value, expire_at)
                return
            while len(self._entries) >= self.options.max_size:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                log.debug("cache_evicted", key=oldest, max_size=self.options.max_size)
            self._entries[key] = CacheEntry(value, expire_at)

    def has(self, key: str) -> bool:
        """Check presence without touching hit/miss statistics."""
        self._check_alive()
        if not self._enabled:
            return False

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return False
            return True

    def delete(self, key: str) -> bool:
        self._check_alive()
        with self._lock:
            return self._entries.pop(key, None) is not None

    def keys(self) -> list[str]:
        """Stored keys in insertion order, expired ones included until swept."""
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        """Drop every entry and reset statistics."""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def generate_key(self, value: Any, rule_name: str, params: Any = None) -> str:
        return fast_hash(value, rule_name, params)

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        """Answer every get as a miss and ignore sets. Stored entries are kept."""
        self._enabled = False

    def get_stats(self) -> CacheStats:
        with self._lock:
            total = self._hits + self._misses
            return CacheStats(
                size=len(self._entries),
                max_size=self.options.max_size,
                hits=self._hits,
                misses=self._misses,
                hit_rate=(self._hits / total) * 100 if total else 0.0,
                enabled=self._enabled,
            )

    def reset_stats(self) -> None:
        with self._lock:
            self._hits = 0
            self._misses = 0

    def clean_expired(self) -> int:
        """Remove every lapsed entry in one pass. Returns the number removed."""
        if not self.options.ttl:
            return 0

        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
        if expired:
            log.debug("cache_swept", removed=len(expired), remaining=len(self._entries))
        return len(expired)

    def _start_sweeper(self) -> None:
        def _sweep_loop() -> None:
            while not self._stop_sweep.wait(self.options.cleanup_interval):
                self.clean_expired()

        self._sweeper = threading.Thread(target=_sweep_loop, name="ruleflow-cache-sweeper", daemon=True)
        self._sweeper.start()

    @property
    def auto_cleanup_running(self) -> bool:
        return self._sweeper is not None and self._sweeper.is_alive()

    def destroy(self) -> None:
        """Stop the background sweep and clear storage. The cache is unusable afterwards."""
        if self._destroyed:
            return
        self._stop_sweep.set()
        if self._sweeper is not None and self._sweeper is not threading.current_thread():
            self._sweeper.join(timeout=1.0)
        self._sweeper = None
        self.clear()
        self._destroyed = True
        log.debug("cache_destroyed")
