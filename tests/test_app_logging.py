"""Tests for logging configuration."""

import logging

from sober_ui.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("sober_ui")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1


def test_configure_logging_sets_level() -> None:
    logger = logging.getLogger("sober_ui")

    configure_logging("warn")
    assert logger.level == logging.WARNING

    configure_logging("chatty")
    assert logger.level == logging.INFO
