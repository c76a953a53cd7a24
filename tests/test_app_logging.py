"""Tests for logging configuration."""

import logging

from meal_planner.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("meal_planner")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1
    assert not logger.propagate


def test_configure_logging_applies_level_and_quiets_httpx() -> None:
    logger = logging.getLogger("meal_planner")

    configure_logging("debug")

    assert logger.level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING
    configure_logging()
