from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Outcome models for a reinitialization run.

Failures never propagate past the Reinitializer; each invocation ends with a
ReinitResult whose optional OperationError carries the classified ErrorKind.
"""

__all__ = [
    "ErrorKind",
    "OperationError",
    "ReinitResult",
]


class ErrorKind(Enum):
    """Classification of a failed or aborted run.

    - INVALID_ARGUMENTS: no input path supplied, nothing touched on disk
    - RESOURCE_EXHAUSTION: memory exhausted while processing
    - OPERATION_CANCELLED: cancellation observed in the population loop
    - UNCLASSIFIED_FAILURE: any other error (file access, schema, row writing)
    """
    INVALID_ARGUMENTS = "invalid_arguments"
    RESOURCE_EXHAUSTION = "resource_exhaustion"
    OPERATION_CANCELLED = "cancelled"
    UNCLASSIFIED_FAILURE = "failed"


@dataclass(frozen=True)
class OperationError:
    kind: ErrorKind
    message: str  # User-facing message shown by the host
    detail: str | None = None  # str(exception), if any


@dataclass(frozen=True)
class ReinitResult:
    """Result of one reinitialize() call.

    Paths are None when the run stopped before they were known (e.g. invalid
    arguments, or the geometry file could not be read).
    """
    geometry_path: str | None
    attribute_path: str | None
    feature_count: int  # Records in the geometry file (0 if unknown)
    rows_written: int  # Rows appended before the run ended
    elapsed_seconds: float
    error: OperationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def cancelled(self) -> bool:
        return self.error is not None and self.error.kind is ErrorKind.OPERATION_CANCELLED

    @property
    def status(self) -> str:
        """Short status token for the SUMMARY line."""
        if self.error is None:
            return "success"
        return self.error.kind.value
