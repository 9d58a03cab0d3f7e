from __future__ import annotations

import json
import re
import traceback
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the diagnostic error log.

Each unexpected failure of a run is written as one JSON Lines record with a
fixed key set: timestamp, context, file, error_type, message, detail.
"""

__all__ = [
    "ErrorRecord",
    "error_type_name",
]

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def error_type_name(error: BaseException) -> str:
    """Exception class name in UPPER_SNAKE form (AttributeStoreError -> ATTRIBUTE_STORE_ERROR)."""
    return _CAMEL_BOUNDARY.sub("_", type(error).__name__).upper()


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        context: Where the error happened, e.g. "Error in Reinitialize Attribute Table"
        file: Geometry file being processed ("" when unknown)
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: str() of the exception
        detail: Formatted traceback
    """
    timestamp: str  # ISO8601 UTC
    context: str
    file: str
    error_type: str  # UPPER_SNAKE
    message: str
    detail: str

    @staticmethod
    def create(context: str, file: str, error_type: str, message: str, detail: str = "") -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            context=context,
            file=file,
            error_type=error_type,
            message=message,
            detail=detail,
        )

    @staticmethod
    def from_exception(context: str, error: BaseException, file: str = "") -> ErrorRecord:
        detail = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        return ErrorRecord.create(
            context=context,
            file=file,
            error_type=error_type_name(error),
            message=str(error),
            detail=detail,
        )

    def to_json_line(self) -> str:
        """Serialize to one JSON line (no extra keys)."""
        return json.dumps(asdict(self), ensure_ascii=False)
