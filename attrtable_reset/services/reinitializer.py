from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from pathlib import Path

from ..config.loader import ReinitConfig
from ..exceptions import OperationCancelled
from ..models.field_spec import AttributeFieldSpec, build_schema
from ..models.operation_result import ErrorKind, OperationError, ReinitResult
from ..shapefile_io.attribute_store import AttributeStore
from ..shapefile_io.geometry import count_features
from .host import HostCallbacks
from .paths import derive_attribute_path
from .progress import ProgressState

"""Attribute table reinitialization.

Reinitializer.reinitialize() replaces the .dbf paired with a geometry file
by a fresh table holding a single FID column numbered 1..N in geometry
record order. Steps:

1. Validate arguments (no I/O when the input path is missing)
2. Count the geometry records
3. Derive the .dbf path and build the one-field schema
4. Create (truncate) the store and append one row per feature, reporting
   progress and polling for cancellation whenever the percent changes
5. Flush the store once and report success

Every exit path ends with host.reset_progress(). Failures are classified
into ErrorKind and returned, never raised.
"""

__all__ = [
    "Reinitializer",
    "classify_failure",
    "DESCRIPTIVE_NAME",
]

logger = logging.getLogger(__name__)

DESCRIPTIVE_NAME = "Reinitialize Attribute Table"

MSG_INVALID_ARGUMENTS = "Incorrect number of arguments given to tool."
MSG_COMPLETE = "Operation complete."
MSG_CANCELLED = "Operation cancelled"
MSG_OUT_OF_MEMORY = "An out-of-memory error has occurred during operation."
MSG_FAILURE = "An error has occurred during operation. See log file for details."

FeatureCounter = Callable[[Path], int]
StoreFactory = Callable[..., AttributeStore]

# Checked in order; the first matching exception type decides the kind.
_FAILURE_PRIORITY: tuple[tuple[type[BaseException], ErrorKind], ...] = (
    (OperationCancelled, ErrorKind.OPERATION_CANCELLED),
    (MemoryError, ErrorKind.RESOURCE_EXHAUSTION),
)

_MESSAGES = {
    ErrorKind.INVALID_ARGUMENTS: MSG_INVALID_ARGUMENTS,
    ErrorKind.OPERATION_CANCELLED: MSG_CANCELLED,
    ErrorKind.RESOURCE_EXHAUSTION: MSG_OUT_OF_MEMORY,
    ErrorKind.UNCLASSIFIED_FAILURE: MSG_FAILURE,
}


def classify_failure(error: BaseException) -> ErrorKind:
    """Map an exception raised during a run to its ErrorKind."""
    for exc_type, kind in _FAILURE_PRIORITY:
        if isinstance(error, exc_type):
            return kind
    return ErrorKind.UNCLASSIFIED_FAILURE


class Reinitializer:
    """Rebuilds attribute tables for one host.

    Args:
        host: Progress/message/cancel/log callbacks
        config: Extensions, path derivation mode, progress label, encoding
        feature_counter: Returns the record count of a geometry file
        store_factory: Creates an attribute store, called as
            (path, schema, truncate=True, encoding=...)

    Each reinitialize() call owns its file handles; calls for different file
    pairs may run on different threads.
    """

    def __init__(
        self,
        host: HostCallbacks,
        config: ReinitConfig | None = None,
        *,
        feature_counter: FeatureCounter = count_features,
        store_factory: StoreFactory = AttributeStore.create,
    ) -> None:
        self.host = host
        self.config = config if config is not None else ReinitConfig()
        self._count_features = feature_counter
        self._create_store = store_factory

    def reinitialize_path(self, geometry_path: str | Path) -> ReinitResult:
        return self.reinitialize([str(geometry_path)])

    def reinitialize(self, args: Sequence[str]) -> ReinitResult:
        """Rebuild the attribute table for args[0].

        Returns:
            ReinitResult; result.error is None on success
        """
        start = time.perf_counter()
        geometry_path: str | None = None
        attribute_path: str | None = None
        feature_count = 0
        rows_written = 0
        try:
            if len(args) < 1 or not args[0]:
                self.host.show_message(MSG_INVALID_ARGUMENTS)
                return self._result(
                    start, None, None, 0, 0,
                    OperationError(ErrorKind.INVALID_ARGUMENTS, MSG_INVALID_ARGUMENTS),
                )

            geometry_path = args[0]
            feature_count = self._count_features(Path(geometry_path))
            attribute_path = derive_attribute_path(
                geometry_path,
                geometry_extension=self.config.geometry_extension,
                attribute_extension=self.config.attribute_extension,
                mode=self.config.path_derivation,
            )
            schema = build_schema()
            logger.debug(
                "reinitialize geometry=%s features=%d attributes=%s schema=%s",
                geometry_path,
                feature_count,
                attribute_path,
                schema_description(schema),
            )

            store = self._create_store(
                Path(attribute_path), schema, truncate=True, encoding=self.config.encoding
            )
            try:
                rows_written = self._populate(store, feature_count)
            except BaseException as e:
                if isinstance(e, OperationCancelled):
                    rows_written = e.rows_written
                else:
                    rows_written = store.row_count
                store.discard()
                raise
            store.flush()

            self.host.show_message(MSG_COMPLETE)
            return self._result(start, geometry_path, attribute_path, feature_count, rows_written)

        except Exception as e:
            kind = classify_failure(e)
            self._report_failure(kind, e)
            return self._result(
                start, geometry_path, attribute_path, feature_count, rows_written,
                OperationError(kind, _MESSAGES[kind], str(e)),
            )
        finally:
            self.host.reset_progress()

    def _populate(self, store: AttributeStore, feature_count: int) -> int:
        """Append rows 1..feature_count; returns the number of rows written."""
        state = ProgressState()
        for i in range(feature_count):
            store.append_row((float(i + 1),))
            percent = state.advance(i, feature_count)
            if percent is not None:
                self.host.report_progress(self.config.progress_label, percent)
                # Cancellation is only polled at percent boundaries
                if self.host.is_cancel_requested():
                    raise OperationCancelled(rows_written=i + 1)
        return feature_count

    def _report_failure(self, kind: ErrorKind, error: Exception) -> None:
        self.host.show_message(_MESSAGES[kind])
        if kind is ErrorKind.UNCLASSIFIED_FAILURE:
            self.host.log_error(f"Error in {DESCRIPTIVE_NAME}", error)
        elif kind is ErrorKind.RESOURCE_EXHAUSTION:
            logger.debug("out of memory during %s", DESCRIPTIVE_NAME)

    @staticmethod
    def _result(
        start: float,
        geometry_path: str | None,
        attribute_path: str | None,
        feature_count: int,
        rows_written: int,
        error: OperationError | None = None,
    ) -> ReinitResult:
        return ReinitResult(
            geometry_path=geometry_path,
            attribute_path=attribute_path,
            feature_count=feature_count,
            rows_written=rows_written,
            elapsed_seconds=time.perf_counter() - start,
            error=error,
        )


def schema_description(schema: Sequence[AttributeFieldSpec]) -> str:
    """Render a schema as "FID:N(10,0)" for log lines."""
    return ",".join(f"{f.name}:{f.field_type.value}({f.width},{f.decimal_places})" for f in schema)
