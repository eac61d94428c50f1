from __future__ import annotations

import logging

from course_wizard.logging_config import TELEMETRY_LOGGER, configure_logging


def test_telemetry_level_is_independent_of_root(monkeypatch) -> None:
    monkeypatch.setenv("COURSE_WIZARD_LOG_LEVEL", "warning")
    monkeypatch.setenv("COURSE_WIZARD_TELEMETRY_LEVEL", "info")
    monkeypatch.delenv("COURSE_WIZARD_DEBUG_HTTP", raising=False)
    try:
        configure_logging()

        assert logging.getLogger().level == logging.WARNING
        assert logging.getLogger(TELEMETRY_LOGGER).level == logging.INFO
        assert logging.getLogger("openai").level == logging.WARNING
    finally:
        monkeypatch.setenv("COURSE_WIZARD_LOG_LEVEL", "INFO")
        configure_logging()


def test_debug_http_opens_client_loggers(monkeypatch) -> None:
    monkeypatch.setenv("COURSE_WIZARD_DEBUG_HTTP", "1")
    try:
        configure_logging()

        assert logging.getLogger("httpx").level == logging.DEBUG
        assert logging.getLogger("openai").level == logging.DEBUG
    finally:
        monkeypatch.delenv("COURSE_WIZARD_DEBUG_HTTP")
        configure_logging()
