# Core module exports
from ruleflow.core.config import Settings, get_settings
from ruleflow.core.logging import (
    configure_logging,
    get_logger,
    engine_logger,
    cache_logger,
    pool_logger,
    schema_logger,
)
