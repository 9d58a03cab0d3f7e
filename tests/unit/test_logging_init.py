from __future__ import annotations

import logging
from io import StringIO

from attrtable_reset.logging.init import (
    LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    enable_debug,
    get_logger,
    log_summary,
    setup_logging,
)


def test_setup_logging_creates_logger_with_labeled_formatter():
    logger = setup_logging()

    assert logger.name == LOGGER_NAME
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.StreamHandler)
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_logging_labeled_prefixes():
    """Lines carry INFO|WARN|ERROR|SUMMARY prefixes."""
    captured_output = StringIO()
    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    logger = logging.getLogger("test_attrtable_reset_labels")
    logger.setLevel(logging.INFO)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    handler = logging.StreamHandler(captured_output)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    logger.info("Test info message")
    logger.warning("Test warning message")
    logger.error("Test error message")
    logger.log(SUMMARY_LEVEL, "Test summary message")

    lines = captured_output.getvalue().strip().split("\n")
    assert lines == [
        "INFO Test info message",
        "WARN Test warning message",
        "ERROR Test error message",
        "SUMMARY Test summary message",
    ]


def test_setup_logging_idempotent():
    logger1 = setup_logging()
    logger2 = setup_logging()
    assert logger1 is logger2
    assert len(logger1.handlers) == 1


def test_get_logger_returns_configured_logger():
    assert get_logger() is setup_logging()


def test_module_loggers_reach_the_application_handler(capsys):
    setup_logging()
    logging.getLogger("attrtable_reset.services.host").info("from a module")
    assert "INFO from a module" in capsys.readouterr().out


def test_log_summary(capsys):
    setup_logging()
    log_summary("status=success input=a.shp")
    assert capsys.readouterr().out == "SUMMARY status=success input=a.shp\n"


def test_enable_debug(capsys):
    logger = setup_logging()
    logger.debug("hidden")
    enable_debug(logger)
    logger.debug("shown")
    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "DEBUG shown" in out


def test_setup_logging_to_custom_stream():
    stream = StringIO()
    logger = setup_logging(stream)
    logger.warning("disk almost full")
    assert stream.getvalue() == "WARN disk almost full\n"


def test_reset_logging_detaches_console_handler():
    from attrtable_reset.logging.init import reset_logging

    first = StringIO()
    setup_logging(first)
    reset_logging()
    second = StringIO()
    setup_logging(second).info("after reset")

    assert first.getvalue() == ""
    assert second.getvalue() == "INFO after reset\n"
    assert len(get_logger().handlers) == 1
