import logging

import structlog

from ruleflow.core.config import Settings, get_settings
from ruleflow.core.errors import AsyncRuleError, Err, ErrorCode, Ok, try_result
from ruleflow.core.logging import (
    LoggerRegistry,
    _censor_sensitive_keys,
    cache_logger,
    configure_logging,
    engine_logger,
)
from ruleflow.validation import CacheOptions, PoolOptions


class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.CACHE_MAX_SIZE == 1000
        assert settings.CACHE_TTL_SECONDS is None
        assert settings.POOL_MAX_SIZE == 100

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("RULEFLOW_CACHE_MAX_SIZE", "25")
        monkeypatch.setenv("RULEFLOW_CACHE_TTL_SECONDS", "1.5")
        monkeypatch.setenv("RULEFLOW_POOL_ENABLED", "false")

        settings = get_settings()

        assert settings.CACHE_MAX_SIZE == 25
        assert settings.CACHE_TTL_SECONDS == 1.5
        assert settings.POOL_ENABLED is False
        assert get_settings() is settings

    def test_option_defaults_follow_settings(self, monkeypatch):
        monkeypatch.setenv("RULEFLOW_CACHE_MAX_SIZE", "7")
        monkeypatch.setenv("RULEFLOW_POOL_INITIAL_SIZE", "3")

        assert CacheOptions().max_size == 7
        assert PoolOptions().initial_size == 3


class TestLogging:
    def test_sensitive_keys_are_redacted(self):
        event = {
            "event": "rule_error",
            "value": "hunter2",
            "context": {"Password": "x", "field": "email"},
            "items": [{"token": "t"}],
        }

        redacted = _censor_sensitive_keys(None, "warning", event)

        assert redacted["value"] == "[REDACTED]"
        assert redacted["context"] == {"Password": "[REDACTED]", "field": "email"}
        assert redacted["items"] == [{"token": "[REDACTED]"}]
        assert redacted["event"] == "rule_error"

    def test_domain_loggers_are_shared(self):
        assert engine_logger() is LoggerRegistry.get("engine")
        assert cache_logger() is not engine_logger()

    def test_configure_logging_accepts_both_renderers(self):
        try:
            configure_logging(level="DEBUG", json_logs=True)
            configure_logging(level="nonsense", json_logs=False)
            assert structlog.is_configured()
        finally:
            structlog.reset_defaults()

    def test_configure_logging_defaults_come_from_settings(self, monkeypatch):
        monkeypatch.setenv("RULEFLOW_LOG_LEVEL", "DEBUG")
        try:
            configure_logging()
            assert logging.getLogger("ruleflow").level == logging.DEBUG
            configure_logging(level="ERROR")
            assert logging.getLogger("ruleflow").level == logging.ERROR
        finally:
            structlog.reset_defaults()


class TestErrorTypes:
    def test_error_codes_compare_as_strings(self):
        assert ErrorCode.REQUIRED == "REQUIRED"
        assert str(ErrorCode.MIN_LENGTH) == "MIN_LENGTH"
        assert ErrorCode("INVALID_EMAIL") is ErrorCode.INVALID_EMAIL

    def test_result_helpers(self):
        assert Ok(2).map(lambda n: n * 3).unwrap() == 6
        assert Err("bad").map(lambda n: n * 3).unwrap_or(0) == 0
        assert Ok(1).and_then(lambda n: Err("stop")).is_err()

    def test_try_result(self):
        assert try_result(lambda: int("5")) == Ok(5)
        assert try_result(lambda: int("x")).is_err()

    def test_async_rule_error_message(self):
        assert 'Rule "lookup" is async' in str(AsyncRuleError("lookup"))
        assert "<anonymous>" in str(AsyncRuleError(None))
