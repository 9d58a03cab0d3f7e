from __future__ import annotations

import struct
from contextlib import ExitStack
from pathlib import Path

import shapefile

from ..exceptions import GeometryFileError

"""Geometry file reader.

Only the record count of the .shp is needed. The reader is given the .shp
(and the .shx index when it exists) but never the .dbf, so a damaged or
incompatible attribute table does not prevent counting the features it is
about to replace.
"""

__all__ = [
    "count_features",
    "index_path_for",
]


def index_path_for(geometry_path: Path) -> Path:
    """Sibling .shx path, keeping the case style of the .shp suffix."""
    suffix = ".SHX" if geometry_path.suffix.isupper() else ".shx"
    return geometry_path.with_suffix(suffix)


def count_features(path: Path | str) -> int:
    """Return the number of records in a geometry file.

    Raises:
        GeometryFileError: If the file is missing or pyshp cannot parse it
    """
    geometry_path = Path(path)
    if not geometry_path.is_file():
        raise GeometryFileError(f"geometry file not found: {geometry_path}")

    try:
        with ExitStack() as stack:
            sources = {"shp": stack.enter_context(geometry_path.open("rb"))}
            index_path = index_path_for(geometry_path)
            if index_path.is_file():
                sources["shx"] = stack.enter_context(index_path.open("rb"))
            reader = stack.enter_context(shapefile.Reader(**sources))
            return len(reader)
    except OSError as e:
        raise GeometryFileError(f"cannot read geometry file {geometry_path}: {e}") from e
    except (shapefile.ShapefileException, struct.error) as e:
        raise GeometryFileError(f"invalid geometry file {geometry_path}: {e}") from e
