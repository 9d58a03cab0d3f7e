from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Console logging for the tool.

Every line starts with a label: INFO, WARN, ERROR or SUMMARY (DEBUG with
--debug). Modules log through logging.getLogger(__name__); their records
propagate to the "attrtable_reset" logger, which owns the single console
handler. The handler is found by name, so setup is idempotent without
module-level state.
"""

__all__ = [
    "LabeledFormatter",
    "setup_logging",
    "get_logger",
    "enable_debug",
    "log_summary",
    "reset_logging",
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
]

LOGGER_NAME = "attrtable_reset"
SUMMARY_LEVEL = 25  # between INFO and WARNING

_CONSOLE_HANDLER = "attrtable_reset.console"


class LabeledFormatter(logging.Formatter):
    """"LABEL message" lines; WARNING is shortened to WARN."""

    RENAMED = {"WARNING": "WARN"}

    def __init__(self) -> None:
        super().__init__("%(label)s %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        record.label = self.RENAMED.get(record.levelname, record.levelname)
        return super().format(record)


def _console_handler(logger: logging.Logger) -> logging.Handler | None:
    for handler in logger.handlers:
        if handler.get_name() == _CONSOLE_HANDLER:
            return handler
    return None


def setup_logging(stream: TextIO | None = None) -> logging.Logger:
    """Attach the labeled console handler (stdout by default) once.

    Returns:
        The "attrtable_reset" logger
    """
    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    logger = logging.getLogger(LOGGER_NAME)
    if _console_handler(logger) is not None:
        return logger

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.set_name(_CONSOLE_HANDLER)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    # No root handlers; output would be duplicated
    logger.propagate = False
    return logger


def get_logger() -> logging.Logger:
    return setup_logging()


def enable_debug(logger: logging.Logger | None = None) -> None:
    (logger or get_logger()).setLevel(logging.DEBUG)


def log_summary(message: str) -> None:
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Detach the console handler; the next setup binds to the current sys.stdout."""
    logger = logging.getLogger(LOGGER_NAME)
    handler = _console_handler(logger)
    if handler is not None:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
