from __future__ import annotations

import logging
import threading
from typing import Any, Protocol, runtime_checkable

from ..logging.error_log import ErrorLogBuffer
from ..models.error_record import ErrorRecord
from .progress import PercentProgressBar

"""Host callback surface consumed by the Reinitializer.

HostCallbacks is the capability object handed to each run: progress and
message output, cancellation polling and the diagnostic log sink. The
Reinitializer never reaches for global state; everything it reports goes
through this object.

ConsoleHost is the terminal implementation used by the CLI.
"""

__all__ = [
    "HostCallbacks",
    "ConsoleHost",
]

logger = logging.getLogger(__name__)


@runtime_checkable
class HostCallbacks(Protocol):
    def report_progress(self, label: str, percent: int) -> None: ...

    def reset_progress(self) -> None: ...

    def is_cancel_requested(self) -> bool: ...

    def show_message(self, text: str) -> None: ...

    def log_error(self, context: str, error: BaseException) -> None: ...


class ConsoleHost:
    """HostCallbacks for command line runs.

    - messages -> INFO lines on the application logger
    - progress -> tqdm percent bar (TTY only) and DEBUG lines
    - cancellation -> threading.Event set by request_cancel()
    - log_error -> ERROR line + JSON Lines record in the error log buffer
    """

    def __init__(self, error_log: ErrorLogBuffer | None = None, *, current_file: str = "") -> None:
        self.error_log = error_log if error_log is not None else ErrorLogBuffer()
        self.current_file = current_file
        self.messages: list[str] = []
        self._cancel = threading.Event()
        self._progress = PercentProgressBar()

    # -- progress -------------------------------------------------------
    def report_progress(self, label: str, percent: int) -> None:
        logger.debug("progress %s %d%%", label, percent)
        self._progress.update(label, percent)

    def reset_progress(self) -> None:
        self._progress.reset()

    # -- cancellation ---------------------------------------------------
    def request_cancel(self) -> None:
        self._cancel.set()

    def is_cancel_requested(self) -> bool:
        return self._cancel.is_set()

    # -- feedback -------------------------------------------------------
    def show_message(self, text: str) -> None:
        self.messages.append(text)
        logger.info(text)

    def log_error(self, context: str, error: BaseException) -> None:
        logger.error("%s: %s", context, error)
        logger.debug("traceback", exc_info=(type(error), error, error.__traceback__))
        self.error_log.append(ErrorRecord.from_exception(context, error, file=self.current_file))

    def close(self) -> None:
        self._progress.close()
        path = self.error_log.flush()
        if path is not None:
            logger.info(f"error details written to {path}")

    def __enter__(self) -> ConsoleHost:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
