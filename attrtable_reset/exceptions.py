"""
Exception hierarchy for the attribute table reinitialization tool.

Errors raised by the collaborators (config, geometry reader, attribute store)
are caught at the Reinitializer boundary and translated into an ErrorKind.
"""

from __future__ import annotations


class ReinitError(Exception):
    """Base exception for all tool-specific errors."""
    pass


class ConfigError(ReinitError):
    """Raised when the YAML configuration is missing, malformed or invalid."""
    pass


# --- Collaborator errors ---

class GeometryFileError(ReinitError):
    """Raised when the geometry (.shp) file cannot be opened or read."""
    pass


class AttributeStoreError(ReinitError):
    """Raised for attribute store (.dbf) failures, including row/schema mismatches."""
    pass


class FieldSpecError(ReinitError):
    """Raised when an attribute field description is invalid."""
    pass


class PathDerivationError(ReinitError):
    """Raised when the attribute table path cannot be derived from the geometry path."""
    pass


# --- Control flow ---

class OperationCancelled(ReinitError):
    """Raised inside the population loop when the host requests cancellation."""

    def __init__(self, rows_written: int) -> None:
        super().__init__(f"operation cancelled after {rows_written} rows")
        self.rows_written = rows_written
