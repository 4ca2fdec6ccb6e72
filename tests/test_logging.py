"""Tests for library logging and logger setup."""

from loguru import logger

import rulegraph
from rulegraph._internal.logging import setup_logger


def test_library_is_silent_by_default(hypertension_text):
    messages = []
    logger.add(messages.append, level="DEBUG")

    rulegraph.normalize(hypertension_text)

    assert messages == []


def test_setup_logger_enables_namespace(hypertension_text, tmp_path):
    log_file = tmp_path / "logs" / "rulegraph.log"
    setup_logger(level="DEBUG", log_file=str(log_file))
    messages = []
    logger.add(messages.append, level="DEBUG")

    rulegraph.normalize(hypertension_text)

    assert any("Format A normalized" in m for m in messages)
    assert "Format A normalized: 3 parameters, 1 rules" in log_file.read_text(encoding="utf-8")


def test_level_filters_debug(hypertension_text):
    setup_logger(level="WARNING")
    messages = []
    logger.add(messages.append, level="WARNING")

    rulegraph.normalize(hypertension_text)

    assert messages == []
