"""Structured Logging for the Validation Engine

- Colored, human-readable dev output
- JSON structured production output
- Redaction of sensitive keys, including raw validated values
- Domain loggers for engine, cache, pool and schema events
"""
import logging
import sys

import structlog
from structlog.types import EventDict, Processor

from ruleflow.core.config import get_settings

SENSITIVE_KEYS = frozenset({"password", "token", "secret", "authorization", "cookie", "value"})


def _censor_sensitive_keys(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Processor that redacts sensitive information."""

    def _redact(obj: dict | list | str, depth: int = 0) -> dict | list | str:
        if depth > 5:  # Prevent infinite recursion
            return obj
        if isinstance(obj, dict):
            return {
                k: "[REDACTED]" if k.lower() in SENSITIVE_KEYS else _redact(v, depth + 1)
                for k, v in obj.items()
            }
        if isinstance(obj, list):
            return [_redact(item, depth + 1) for item in obj]
        return obj

    return _redact(event_dict)


def _add_service_info(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Processor that adds service metadata."""
    event_dict.setdefault("service", "ruleflow")
    return event_dict


def get_shared_processors() -> list[Processor]:
    """Processors used in both dev and prod configurations."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _add_service_info,
        _censor_sensitive_keys,
    ]


def configure_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """Configure the logging system.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Defaults to Settings.LOG_LEVEL.
        json_logs: If True, output JSON format (for production). If False, colored console output.
            Defaults to Settings.LOG_JSON.
    """
    settings = get_settings()
    level = level or settings.LOG_LEVEL
    json_logs = settings.LOG_JSON if json_logs is None else json_logs
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors = get_shared_processors()

    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )

    # Formatter for stdlib logger (handles logs from third-party libs)
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    ruleflow_logger = logging.getLogger("ruleflow")
    ruleflow_logger.handlers = [handler]
    ruleflow_logger.setLevel(log_level)
    ruleflow_logger.propagate = False


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ from the calling module)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


class LoggerRegistry:
    """Registry of pre-configured loggers for the engine's domains."""

    _loggers: dict[str, structlog.stdlib.BoundLogger] = {}

    @classmethod
    def get(cls, name: str) -> structlog.stdlib.BoundLogger:
        """Get or create a logger for the given domain."""
        if name not in cls._loggers:
            cls._loggers[name] = get_logger(f"ruleflow.{name}")
        return cls._loggers[name]


def engine_logger() -> structlog.stdlib.BoundLogger:
    """Logger for rule-chain execution events."""
    return LoggerRegistry.get("engine")


def cache_logger() -> structlog.stdlib.BoundLogger:
    """Logger for result cache events."""
    return LoggerRegistry.get("cache")


def pool_logger() -> structlog.stdlib.BoundLogger:
    """Logger for result pool events."""
    return LoggerRegistry.get("pool")


def schema_logger() -> structlog.stdlib.BoundLogger:
    """Logger for schema validation events."""
    return LoggerRegistry.get("schema")
