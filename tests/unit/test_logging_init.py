from __future__ import annotations

import logging
from io import StringIO
from unittest.mock import patch

from excel_db.logging.init import (
    LabeledFormatter,
    enable_debug,
    get_logger,
    log_summary,
    setup_logging,
)


def test_setup_logging_creates_logger_with_labeled_formatter(fresh_logging):
    logger = setup_logging()

    assert logger.name == "excel_db"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.StreamHandler)
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_logging_labeled_prefixes():
    captured_output = StringIO()

    logger = logging.getLogger("test_excel_db_labels")
    logger.setLevel(logging.INFO)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logging.addLevelName(25, "SUMMARY")
    handler = logging.StreamHandler(captured_output)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    logger.info("Test info message")
    logger.warning("Test warning message")
    logger.error("Test error message")
    logger.log(25, "Test summary message")

    lines = captured_output.getvalue().strip().split('\n')
    assert lines == [
        "INFO Test info message",
        "WARN Test warning message",
        "ERROR Test error message",
        "SUMMARY Test summary message",
    ]


def test_get_logger_returns_configured_logger(fresh_logging):
    setup_logger = setup_logging()
    assert get_logger() is setup_logger


def test_setup_logging_idempotent(fresh_logging):
    logger1 = setup_logging()
    logger2 = setup_logging()
    assert logger1 is logger2
    assert len(logger1.handlers) == 1


def test_library_loggers_go_through_configured_handler(fresh_logging, capsys):
    setup_logging()
    logging.getLogger("excel_db.services.database").warning("cache diverged")
    assert "WARN cache diverged" in capsys.readouterr().out


def test_log_summary(fresh_logging, capsys):
    setup_logging()
    log_summary("op=select sheet=Sheet1 affected=1 rows=2 elapsed_sec=0")
    assert "SUMMARY op=select sheet=Sheet1" in capsys.readouterr().out


def test_summary_level_name(fresh_logging):
    setup_logging()
    assert logging.getLevelName(25) == "SUMMARY"


def test_enable_debug(fresh_logging, capsys):
    logger = setup_logging()
    enable_debug()
    assert logger.level == logging.DEBUG
    assert all(h.level == logging.DEBUG for h in logger.handlers)
    assert "DEBUG debug mode enabled" in capsys.readouterr().out


def test_logging_with_progress_bar_disabled(fresh_logging):
    with patch('sys.stdout.isatty', return_value=False):
        logger = setup_logging()
        logger.info("Test message when not TTY")
        assert logger.level == logging.INFO
