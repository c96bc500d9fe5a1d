"""Tests for structlog/stdlib logging wiring."""

from __future__ import annotations

import logging

import pytest
import structlog

from gleaner.infrastructure.config.schema import AppConfig
from gleaner.infrastructure.logging.setup import (
    UVICORN_LOGGERS,
    build_logging_config,
    configure_logging,
    stop_queue_listener,
)


@pytest.fixture()
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    stop_queue_listener()
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestBuildLoggingConfig:
    def test_shape(self) -> None:
        cfg = build_logging_config(AppConfig(log_level="DEBUG"))

        assert cfg["version"] == 1
        assert cfg["disable_existing_loggers"] is False
        assert cfg["handlers"]["default"]["formatter"] == "structlog"
        assert cfg["handlers"]["default"]["stream"] == "ext://sys.stderr"
        assert cfg["root"] == {"handlers": ["default"], "level": "DEBUG"}
        assert set(cfg["loggers"]) == set(UVICORN_LOGGERS)

    @pytest.mark.parametrize(
        ("environment", "renderer"),
        [("prod", structlog.processors.JSONRenderer), ("dev", structlog.dev.ConsoleRenderer)],
    )
    def test_renderer_follows_log_format(self, environment: str, renderer: type) -> None:
        cfg = build_logging_config(AppConfig(environment=environment))
        processors = cfg["formatters"]["structlog"]["processors"]
        assert isinstance(processors[-1], renderer)


class TestConfigureLogging:
    def test_routes_root_through_queue(self, restore_logging) -> None:
        cfg = configure_logging(AppConfig(log_level="WARNING"))

        root = logging.getLogger()
        assert cfg["root"]["level"] == "WARNING"
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert type(root.handlers[0]).__name__ == "_DictPreservingQueueHandler"
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_stop_is_idempotent(self, restore_logging) -> None:
        configure_logging(AppConfig())
        stop_queue_listener()
        stop_queue_listener()
