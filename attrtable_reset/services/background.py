from __future__ import annotations

import threading
from collections.abc import Sequence
from concurrent.futures import Future

from ..models.operation_result import ReinitResult
from .reinitializer import Reinitializer

"""Run a reinitialization off the calling thread.

This is the dialog "OK" pattern: the caller hands over the arguments and
gets a handle back immediately, so a UI loop stays responsive. There is one
worker per run; nothing else touches the run's files.
"""

__all__ = [
    "BackgroundRun",
    "run_in_background",
]


class BackgroundRun:
    """Handle on a reinitialization running on its own thread."""

    def __init__(self, reinitializer: Reinitializer, args: Sequence[str]) -> None:
        self.reinitializer = reinitializer
        self.args = list(args)
        self._future: Future[ReinitResult] = Future()
        self._thread = threading.Thread(
            target=self._run,
            name=f"reinit-{self.args[0] if self.args else 'noargs'}",
            daemon=True,
        )

    def _run(self) -> None:
        if not self._future.set_running_or_notify_cancel():  # pragma: no cover
            return
        try:
            self._future.set_result(self.reinitializer.reinitialize(self.args))
        except BaseException as e:  # only a failing host callback gets here
            self._future.set_exception(e)

    def start(self) -> BackgroundRun:
        self._thread.start()
        return self

    def cancel(self) -> None:
        """Ask the run to stop at its next progress boundary."""
        request_cancel = getattr(self.reinitializer.host, "request_cancel", None)
        if request_cancel is None:
            raise AttributeError("host does not support cancellation requests")
        request_cancel()

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: float | None = None) -> ReinitResult:
        return self._future.result(timeout=timeout)


def run_in_background(reinitializer: Reinitializer, args: Sequence[str]) -> BackgroundRun:
    return BackgroundRun(reinitializer, args).start()
