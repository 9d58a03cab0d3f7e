from __future__ import annotations

from pathlib import Path

from ..exceptions import PathDerivationError

"""Derive the attribute table path from the geometry file path.

Two modes:
- suffix: replace only the trailing geometry extension (case-insensitive;
  an uppercase extension is replaced by an uppercase one)
- legacy: replace the first occurrence of the extension anywhere in the path,
  which also rewrites a matching directory name ("/data/roads.shp.d/x.shp")

Both refuse to return the input path unchanged, so the geometry file can
never be opened as the attribute store.
"""

__all__ = [
    "derive_attribute_path",
    "PATH_DERIVATION_MODES",
]

PATH_DERIVATION_MODES = ("suffix", "legacy")


def derive_attribute_path(
    geometry_path: str | Path,
    *,
    geometry_extension: str = ".shp",
    attribute_extension: str = ".dbf",
    mode: str = "suffix",
) -> str:
    path_str = str(geometry_path)
    if mode == "suffix":
        if not path_str.lower().endswith(geometry_extension.lower()):
            raise PathDerivationError(
                f"geometry path does not end with {geometry_extension}: {path_str}"
            )
        matched = path_str[-len(geometry_extension):]
        # Keep the case style of the matched suffix (ROADS.SHP -> ROADS.DBF)
        replacement = attribute_extension.upper() if matched.isupper() else attribute_extension
        derived = path_str[: -len(geometry_extension)] + replacement
    elif mode == "legacy":
        derived = path_str.replace(geometry_extension, attribute_extension, 1)
    else:
        raise PathDerivationError(f"unknown path derivation mode: {mode!r}")

    if derived == path_str:
        raise PathDerivationError(f"no {geometry_extension} extension found in {path_str}")
    return derived
