"""Default record mapper: turns a record into ordered ``(column, value)`` pairs.

Insert and Update accept any callable with the same shape, so applications
with their own naming rules can plug in a different mapper.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import fields, is_dataclass
from typing import Any

from pydantic import BaseModel

from stmtcraft.errors import UnsupportedType

# Field metadata key holding the column name override; "-" excludes the field.
COLUMN_KEY = "db"
EXCLUDE = "-"

_FIRST_CAP = re.compile(r"(.)([A-Z][a-z]+)")
_ALL_CAP = re.compile(r"([a-z0-9])([A-Z])")


def to_snake_case(name: str) -> str:
    """``UserID`` -> ``user_id``, ``createdAt`` -> ``created_at``."""
    name = _FIRST_CAP.sub(r"\1_\2", name)
    return _ALL_CAP.sub(r"\1_\2", name).lower()


def _column_for(name: str, override: Any) -> str | None:
    if override == EXCLUDE:
        return None
    if override:
        return str(override)
    return to_snake_case(name)


def record_columns(record: Any) -> list[tuple[str, Any]]:
    """Return the record's columns and values in declaration order.

    Mappings are taken verbatim. Dataclass fields read the override from
    ``field(metadata={"db": ...})``; pydantic fields from
    ``Field(json_schema_extra={"db": ...})``.
    """
    if isinstance(record, Mapping):
        return [(str(key), value) for key, value in record.items()]

    pairs: list[tuple[str, Any]] = []
    if isinstance(record, BaseModel):
        for name, info in type(record).model_fields.items():
            extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
            column = _column_for(name, extra.get(COLUMN_KEY))
            if column is not None:
                pairs.append((column, getattr(record, name)))
        return pairs

    if is_dataclass(record) and not isinstance(record, type):
        for f in fields(record):
            column = _column_for(f.name, f.metadata.get(COLUMN_KEY))
            if column is not None:
                pairs.append((column, getattr(record, f.name)))
        return pairs

    raise UnsupportedType(record, "records must be mappings, dataclasses or pydantic models")
