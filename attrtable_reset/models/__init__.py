"""Domain models for the attribute table reinitialization tool."""

from .error_record import ErrorRecord
from .field_spec import AttributeFieldSpec, FieldType, build_schema, fid_field
from .operation_result import ErrorKind, OperationError, ReinitResult

__all__ = [
    # Schema models
    "AttributeFieldSpec",
    "FieldType",
    "build_schema",
    "fid_field",
    # Result models
    "ErrorKind",
    "OperationError",
    "ReinitResult",
    "ErrorRecord",
]
