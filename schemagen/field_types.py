"""The closed set of attribute types and their per-site mappings.

Each consumer of a type (default values, Ecto schema types, migration
column types) looks it up in its own table below. Adding a FieldType
member without extending every table makes schema building fail with
UnsupportedType instead of silently emitting something wrong.
"""

from __future__ import annotations

import copy
import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from .errors import UnsupportedType


class FieldType(str, Enum):
    """Attribute types accepted on the command line."""

    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    MAP = "map"
    STRING = "string"
    ARRAY = "array"
    REFERENCES = "references"
    TEXT = "text"
    DATE = "date"
    TIME = "time"
    NAIVE_DATETIME = "naive_datetime"
    UTC_DATETIME = "utc_datetime"
    UUID = "uuid"
    BINARY = "binary"


# Types that consume the next token segment (element type / target table)
COMPOSITE_TYPES: frozenset[FieldType] = frozenset({FieldType.ARRAY, FieldType.REFERENCES})

SCALAR_TYPES: frozenset[FieldType] = frozenset(FieldType) - COMPOSITE_TYPES

# Accepted spellings that resolve to a canonical type
_ALIASES: dict[str, FieldType] = {
    "datetime": FieldType.NAIVE_DATETIME,
}


class _NoDefault:
    """Marker for types that never receive a default value."""

    def __repr__(self) -> str:
        return "NO_DEFAULT"

    def __copy__(self) -> _NoDefault:
        return self


NO_DEFAULT = _NoDefault()

# Sentinel moment used for every date/time placeholder
_SENTINEL = datetime.datetime(2010, 4, 17, 14, 0, 0)

_DEFAULT_VALUES: dict[FieldType, Any] = {
    FieldType.INTEGER: 0,
    FieldType.FLOAT: 0.0,
    FieldType.DECIMAL: Decimal("0"),
    FieldType.BOOLEAN: False,
    FieldType.MAP: {},
    FieldType.STRING: "",
    FieldType.ARRAY: [],
    FieldType.REFERENCES: NO_DEFAULT,
    FieldType.TEXT: "",
    FieldType.DATE: _SENTINEL.date(),
    FieldType.TIME: _SENTINEL.time(),
    FieldType.NAIVE_DATETIME: _SENTINEL,
    FieldType.UTC_DATETIME: _SENTINEL.replace(tzinfo=datetime.timezone.utc),
    FieldType.UUID: "7488a646-e31f-11e4-aace-600308960662",
    FieldType.BINARY: b"",
}

# Ecto field types; names that are not atoms are written verbatim
_SCHEMA_TYPES: dict[FieldType, str] = {
    FieldType.INTEGER: "integer",
    FieldType.FLOAT: "float",
    FieldType.DECIMAL: "decimal",
    FieldType.BOOLEAN: "boolean",
    FieldType.MAP: "map",
    FieldType.STRING: "string",
    FieldType.ARRAY: "array",
    FieldType.REFERENCES: "id",
    FieldType.TEXT: "string",
    FieldType.DATE: "date",
    FieldType.TIME: "time",
    FieldType.NAIVE_DATETIME: "naive_datetime",
    FieldType.UTC_DATETIME: "utc_datetime",
    FieldType.UUID: "Ecto.UUID",
    FieldType.BINARY: "binary",
}

_MIGRATION_TYPES: dict[FieldType, str] = {
    FieldType.INTEGER: "integer",
    FieldType.FLOAT: "float",
    FieldType.DECIMAL: "decimal",
    FieldType.BOOLEAN: "boolean",
    FieldType.MAP: "map",
    FieldType.STRING: "string",
    FieldType.ARRAY: "array",
    FieldType.REFERENCES: "integer",
    FieldType.TEXT: "text",
    FieldType.DATE: "date",
    FieldType.TIME: "time",
    FieldType.NAIVE_DATETIME: "naive_datetime",
    FieldType.UTC_DATETIME: "utc_datetime",
    FieldType.UUID: "uuid",
    FieldType.BINARY: "binary",
}


def resolve_type_token(token: str) -> FieldType | None:
    """Map a raw type token to its canonical FieldType, or None if unknown."""
    if token in _ALIASES:
        return _ALIASES[token]
    try:
        return FieldType(token)
    except ValueError:
        return None


def supported_type_names() -> list[str]:
    """Sorted type names for error messages, aliases included."""
    return sorted([t.value for t in FieldType] + list(_ALIASES))


def _lookup(table: dict[FieldType, Any], field_type: FieldType, site: str) -> Any:
    try:
        return table[field_type]
    except KeyError:
        raise UnsupportedType(getattr(field_type, "value", str(field_type)), site) from None


def default_value(field_type: FieldType) -> Any:
    """Placeholder value for sample data; NO_DEFAULT for references."""
    return copy.copy(_lookup(_DEFAULT_VALUES, field_type, "default value"))


def schema_type(field_type: FieldType) -> str:
    """Ecto schema field type name."""
    return _lookup(_SCHEMA_TYPES, field_type, "schema type")


def migration_type(field_type: FieldType) -> str:
    """Migration column type name."""
    return _lookup(_MIGRATION_TYPES, field_type, "migration type")
