"""Shared Resources

One cache and one pool, built explicitly and injected into any number of
validators. There are no module-level singletons: the owner of a
SharedResources decides when it is created and destroyed.

Usage:
    resources = SharedResources.create()
    email_validator = resources.validator().rule("email")
    ...
    resources.destroy()
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from ruleflow.core.config import Settings, get_settings
from ruleflow.core.logging import engine_logger

from .cache import CacheOptions, RuleCache
from .pool import PoolOptions, ResultPool
from .registry import RuleRegistry, create_default_registry
from .schema import FieldSpec, SchemaValidator, SchemaValidatorOptions
from .validator import Validator, ValidatorOptions

log = engine_logger()


@dataclass
class SharedResources:
    cache: RuleCache
    pool: ResultPool
    registry: RuleRegistry

    @classmethod
    def create(
        cls,
        settings: Settings | None = None,
        registry: RuleRegistry | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> SharedResources:
        """Build a cache and pool from settings (environment by default)."""
        settings = settings or get_settings()
        cache = RuleCache(
            CacheOptions(
                max_size=settings.CACHE_MAX_SIZE,
                ttl=settings.CACHE_TTL_SECONDS,
                enabled=settings.CACHE_ENABLED,
                auto_cleanup=settings.CACHE_AUTO_CLEANUP,
                cleanup_interval=settings.CACHE_CLEANUP_INTERVAL_SECONDS,
            ),
            clock=clock,
        )
        pool = ResultPool(
            PoolOptions(
                initial_size=settings.POOL_INITIAL_SIZE,
                max_size=settings.POOL_MAX_SIZE,
                enabled=settings.POOL_ENABLED,
            )
        )
        log.debug("shared_resources_created", cache_max_size=cache.max_size, pool_max_size=pool.options.max_size)
        return cls(cache=cache, pool=pool, registry=registry or create_default_registry())

    def validator(self, **options: Any) -> Validator[Any]:
        """A Validator wired to the shared cache, pool and registry."""
        return Validator(
            ValidatorOptions(cache_instance=self.cache, pool_instance=self.pool, **options),
            registry=self.registry,
        )

    def schema_validator(self, schema: Mapping[str, FieldSpec], **options: Any) -> SchemaValidator:
        return SchemaValidator(schema, SchemaValidatorOptions(pool_instance=self.pool, **options))

    def destroy(self) -> None:
        """Stop the cache sweep and clear both resources."""
        self.cache.destroy()
        self.pool.destroy()
        log.debug("shared_resources_destroyed")

    def __enter__(self) -> SharedResources:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.destroy()
