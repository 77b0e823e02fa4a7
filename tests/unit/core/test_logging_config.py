"""Unit tests for structured logging configuration."""

from __future__ import annotations

import logging

from core.logging_config import ROOT_LOGGER_NAME, get_logger


def test_get_logger_enables_info_events_on_shelf_logger() -> None:
    """Info-level events should have a handler and not be filtered out."""
    get_logger("core.test")
    shelf_logger = logging.getLogger(ROOT_LOGGER_NAME)

    assert shelf_logger.handlers and shelf_logger.isEnabledFor(logging.INFO)


def test_get_logger_nests_module_loggers_under_shelf(caplog) -> None:
    """Module events should carry the shelf-prefixed logger name."""
    with caplog.at_level(logging.INFO, logger=ROOT_LOGGER_NAME):
        get_logger("store.sample").info("sample_event", answer=42)

    assert [record.name for record in caplog.records] == ["shelf.store.sample"]
