"""Tests for the logging helpers."""

import logging

import pytest

from shared.logging.logging_setup import ColoredFormatter, ColorLogger, resolve_log_level


@pytest.mark.parametrize("name, level", [("debug", logging.DEBUG), ("WARNING", logging.WARNING), ("chatty", logging.INFO)])
def test_resolve_log_level(name, level):
    assert resolve_log_level(name) == level


def test_color_is_attached_to_the_record(caplog):
    logger = ColorLogger(logging.getLogger("tests.color"))
    with caplog.at_level(logging.INFO, logger="tests.color"):
        logger.info("Index %s has been created.", "docs", color="green")
        logger.warning("plain")

    colored, plain = caplog.records
    assert colored.getMessage() == "Index docs has been created."
    assert colored.color == "green"
    assert not hasattr(plain, "color")


def test_colored_formatter_prefixes_warnings():
    formatter = ColoredFormatter("UTC", "%(message)s")
    record = logging.LogRecord("tests", logging.WARNING, __file__, 1, "Facet %s skipped", ("color",), None)
    record.color = "yellow"

    line = formatter.format(record)

    assert line.startswith("\033[33m")
    assert "⚠️ Facet color skipped" in line
