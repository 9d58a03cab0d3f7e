from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress bookkeeping and display.

ProgressState decides when a percent notification is due: only when the
integer percent changes, so a run emits at most one notification per
distinct value. PercentProgressBar renders those notifications with tqdm,
and only on a TTY so that CI logs are not filled with control sequences.
"""

__all__ = [
    "ProgressState",
    "PercentProgressBar",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


@dataclass
class ProgressState:
    """Percent tracker for the row population loop.

    previous_percent starts at 0, so the first notification of a run is 1%
    (or higher for very small feature counts).
    """
    current_percent: int = 0
    previous_percent: int = 0

    def advance(self, index: int, total: int) -> int | None:
        """Return the new percent for row `index` of `total`, or None if unchanged."""
        if total <= 0:
            return None
        self.current_percent = (100 * index) // total
        if self.current_percent == self.previous_percent:
            return None
        self.previous_percent = self.current_percent
        return self.current_percent


class PercentProgressBar:
    """0-100 progress bar driven by percent notifications.

    In non-TTY environments no tqdm instance is created and every method is
    a no-op.
    """

    def __init__(self, *, description: str = "Reinitializing") -> None:
        self.description = description
        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None = None
        self._label: str | None = None

    def _ensure_bar(self) -> TqdmType[Any]:
        if self.pbar is None:
            self.pbar = tqdm(
                total=100,
                desc=self.description,
                unit="%",
                disable=False,
                leave=False,
                position=0,
                ncols=80,
                ascii=True,
            )
        return self.pbar

    def update(self, label: str, percent: int) -> None:
        if not self.enabled:
            return
        pbar = self._ensure_bar()
        if label and label != self._label:
            pbar.set_description(label)
            self._label = label
        pbar.n = max(0, min(100, percent))
        pbar.refresh()

    def reset(self) -> None:
        """Clear the bar; the next update starts a fresh one."""
        self.close()

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None
            self._label = None

    def __enter__(self) -> PercentProgressBar:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
