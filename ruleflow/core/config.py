from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for production (structured JSON), False for dev (colored)

    # Result cache
    CACHE_ENABLED: bool = True
    CACHE_MAX_SIZE: int = 1000
    CACHE_TTL_SECONDS: float | None = None  # None: entries never expire
    CACHE_AUTO_CLEANUP: bool = False
    CACHE_CLEANUP_INTERVAL_SECONDS: float = 60.0

    # Result pool
    POOL_ENABLED: bool = True
    POOL_INITIAL_SIZE: int = 10
    POOL_MAX_SIZE: int = 100

    class Config:
        env_prefix = "RULEFLOW_"
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()
