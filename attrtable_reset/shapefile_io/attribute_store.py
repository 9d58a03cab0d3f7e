from __future__ import annotations

import datetime
import logging
import math
import struct
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any

import shapefile

from ..exceptions import AttributeStoreError
from ..models.field_spec import AttributeFieldSpec, FieldType

"""Attribute store (.dbf) writer.

pyshp's Writer is given only a dbf file handle, so the .shp/.shx pair is
never touched. The handle is opened (and the file truncated) as soon as the
store is created; rows are streamed to disk as they are appended and the
header with the final record count is written by flush().

discard() closes the handle without writing the final header. The file is
then left in whatever partial state the appends produced.
"""

__all__ = [
    "AttributeStore",
    "AttributeTable",
    "read_attribute_table",
]

logger = logging.getLogger(__name__)


def _value_matches(field: AttributeFieldSpec, value: Any) -> bool:
    if field.field_type.is_numeric:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        return not isinstance(value, float) or math.isfinite(value)
    if field.field_type is FieldType.CHARACTER:
        return isinstance(value, str)
    if field.field_type is FieldType.DATE:
        return isinstance(value, datetime.date)
    if field.field_type is FieldType.LOGICAL:
        return isinstance(value, bool)
    return False  # pragma: no cover (exhaustive enum)


class AttributeStore:
    """A new attribute table being written row by row.

    Use AttributeStore.create(); the instance owns its file handle until
    flush() or discard() is called.
    """

    def __init__(self, path: Path, schema: Sequence[AttributeFieldSpec], handle: IO[bytes], *, encoding: str = "utf-8") -> None:
        self.path = path
        self.schema = tuple(schema)
        self._handle = handle
        self._writer = shapefile.Writer(dbf=handle, encoding=encoding)
        for field in self.schema:
            name, code, width, decimals = field.as_dbf_field()
            self._writer.field(name, code, size=width, decimal=decimals)
        self._row_count = 0
        self._closed = False

    @classmethod
    def create(
        cls,
        path: Path | str,
        schema: Sequence[AttributeFieldSpec],
        truncate: bool = True,
        *,
        encoding: str = "utf-8",
    ) -> AttributeStore:
        """Create the store file and return an open store.

        Args:
            path: Target .dbf path
            schema: Ordered field specs (at least one)
            truncate: Overwrite an existing file; when False an existing file is an error
            encoding: Text encoding for character fields
        """
        target = Path(path)
        if not schema:
            raise AttributeStoreError("attribute store schema must contain at least one field")
        if not truncate and target.exists():
            raise AttributeStoreError(f"attribute store already exists: {target}")
        try:
            handle = target.open("wb+")
        except OSError as e:
            raise AttributeStoreError(f"cannot create attribute store {target}: {e}") from e
        logger.debug("created attribute store %s fields=%s", target, [f.name for f in schema])
        try:
            return cls(target, schema, handle, encoding=encoding)
        except Exception:
            handle.close()
            raise

    @property
    def row_count(self) -> int:
        return self._row_count

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            raise AttributeStoreError(f"attribute store already closed: {self.path}")

    def append_row(self, values: Sequence[Any]) -> None:
        """Append one row; values must match the schema in arity and type."""
        self._ensure_open()
        if len(values) != len(self.schema):
            raise AttributeStoreError(
                f"row arity {len(values)} does not match schema arity {len(self.schema)}"
            )
        for field, value in zip(self.schema, values):
            if not _value_matches(field, value):
                raise AttributeStoreError(
                    f"value {value!r} does not match field {field.name} ({field.field_type.name})"
                )
        try:
            self._writer.record(*values)
        except (shapefile.ShapefileException, OSError) as e:
            raise AttributeStoreError(f"failed writing row {self._row_count + 1}: {e}") from e
        self._row_count += 1

    def flush(self) -> None:
        """Write the final header and close the file. Allowed once."""
        self._ensure_open()
        self._closed = True
        try:
            self._writer.close()
        except (shapefile.ShapefileException, OSError) as e:
            raise AttributeStoreError(f"failed finalizing attribute store {self.path}: {e}") from e
        finally:
            self._handle.close()
        logger.debug("flushed attribute store %s rows=%d", self.path, self._row_count)

    def discard(self) -> None:
        """Close the file handle without finalizing. No-op if already closed."""
        if self._closed:
            return
        self._closed = True
        # Closing the handle first keeps the writer from finalizing on close().
        self._handle.close()
        logger.debug("discarded attribute store %s after %d rows", self.path, self._row_count)


@dataclass(frozen=True)
class AttributeTable:
    fields: list[tuple[str, str, int, int]]  # (name, type code, width, decimals)
    records: list[list[Any]]

    @property
    def field_names(self) -> list[str]:
        return [f[0] for f in self.fields]


def read_attribute_table(path: Path | str, *, encoding: str = "utf-8") -> AttributeTable:
    """Read a .dbf file's field descriptors and records."""
    table_path = Path(path)
    try:
        with table_path.open("rb") as fh:
            with shapefile.Reader(dbf=fh, encoding=encoding) as reader:
                fields = [
                    (str(f[0]), str(f[1]), int(f[2]), int(f[3]))
                    for f in reader.fields
                    if f[0] != "DeletionFlag"
                ]
                records = [list(r) for r in reader.records()]
    except OSError as e:
        raise AttributeStoreError(f"cannot read attribute store {table_path}: {e}") from e
    except (shapefile.ShapefileException, struct.error, UnicodeDecodeError) as e:
        raise AttributeStoreError(f"invalid attribute store {table_path}: {e}") from e
    return AttributeTable(fields=fields, records=records)
