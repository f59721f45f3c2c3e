"""Result Pool

Free list of reusable ValidationResult records. Released records are reset to
defaults before they are stored, so a reused record is indistinguishable from a
fresh one. The pool never fails to hand out a record: when empty it creates one.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Iterable

from ruleflow.core.config import get_settings
from ruleflow.core.logging import pool_logger

from .types import ValidationResult

log = pool_logger()


@dataclass(frozen=True, slots=True)
class PoolOptions:
    """Configuration for a ResultPool. Defaults come from Settings."""
    initial_size: int = field(default_factory=lambda: get_settings().POOL_INITIAL_SIZE)
    max_size: int = field(default_factory=lambda: get_settings().POOL_MAX_SIZE)
    enabled: bool = field(default_factory=lambda: get_settings().POOL_ENABLED)

    def __post_init__(self) -> None:
        if self.max_size < 0:
            raise ValueError(f"max_size must not be negative, got {self.max_size}")
        if self.initial_size < 0:
            raise ValueError(f"initial_size must not be negative, got {self.initial_size}")


@dataclass(frozen=True, slots=True)
class PoolStats:
    """Point-in-time pool statistics."""
    size: int
    max_size: int
    created: int
    acquired: int
    released: int
    reused: int
    enabled: bool

    @property
    def reuse_rate(self) -> float:
        """Share of acquisitions served from the free list, as a percentage."""
        return (self.reused / self.acquired) * 100 if self.acquired else 0.0


class ResultPool:
    """Pool of ValidationResult records.

    Ownership: whoever acquires a record decides when it is released. After
    release the caller must not touch the record again.
    """

    def __init__(self, options: PoolOptions | None = None):
        self.options = options or PoolOptions()
        self._free: list[ValidationResult] = []
        self._enabled = self.options.enabled
        self._lock = threading.RLock()
        self._created = 0
        self._acquired = 0
        self._released = 0
        self._reused = 0

        if self._enabled:
            for _ in range(min(self.options.initial_size, self.options.max_size)):
                self._free.append(ValidationResult())
                self._created += 1

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def size(self) -> int:
        return len(self._free)

    def __len__(self) -> int:
        return len(self._free)

    def acquire(self) -> ValidationResult:
        if not self._enabled:
            return ValidationResult()

        with self._lock:
            self._acquired += 1
            if self._free:
                self._reused += 1
                return self._free.pop()
            self._created += 1
            return ValidationResult()

    def release(self, result: ValidationResult) -> None:
        """Reset and store a record, or drop it when the pool is full."""
        if not self._enabled:
            return

        with self._lock:
            self._released += 1
            if len(self._free) >= self.options.max_size:
                return
            result.reset()
            self._free.append(result)

    def release_many(self, results: Iterable[ValidationResult]) -> None:
        for result in results:
            self.release(result)

    def clear(self) -> None:
        """Empty the free list and reset usage counters."""
        with self._lock:
            self._free.clear()
            self._acquired = 0
            self._released = 0
            self._reused = 0

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        self._enabled = False

    def get_stats(self) -> PoolStats:
        with self._lock:
            return PoolStats(
                size=len(self._free),
                max_size=self.options.max_size,
                created=self._created,
                acquired=self._acquired,
                released=self._released,
                reused=self._reused,
                enabled=self._enabled,
            )

    def reset_stats(self) -> None:
        with self._lock:
            self._created = 0
            self._acquired = 0
            self._released = 0
            self._reused = 0

    def destroy(self) -> None:
        self.clear()
        log.debug("pool_destroyed")
