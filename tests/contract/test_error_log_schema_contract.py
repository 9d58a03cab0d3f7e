from __future__ import annotations

import json

import jsonschema
import pytest
from jsonschema.exceptions import ValidationError

from attrtable_reset.exceptions import AttributeStoreError
from attrtable_reset.models.error_record import ErrorRecord

"""Error log JSON Lines contract: fixed keys, all strings, UTC 'Z' timestamps."""

ERROR_RECORD_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "required": ["timestamp", "context", "file", "error_type", "message", "detail"],
    "properties": {
        "timestamp": {"type": "string", "pattern": r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$"},
        "context": {"type": "string"},
        "file": {"type": "string"},
        "error_type": {"type": "string", "pattern": r"^[A-Z][A-Z0-9_]*$"},
        "message": {"type": "string"},
        "detail": {"type": "string"},
    },
}


def _record_line() -> dict:
    try:
        raise AttributeStoreError("cannot create attribute store data/roads.dbf")
    except AttributeStoreError as e:
        rec = ErrorRecord.from_exception("Error in Reinitialize Attribute Table", e, file="data/roads.shp")
    return json.loads(rec.to_json_line())


def test_error_log_record_matches_schema():
    jsonschema.validate(_record_line(), ERROR_RECORD_SCHEMA)


def test_error_log_schema_rejects_extra_key():
    record = _record_line()
    record["row"] = 2
    with pytest.raises(ValidationError):
        jsonschema.validate(record, ERROR_RECORD_SCHEMA)
