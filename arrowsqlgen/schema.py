"""Mapping of Postgres type names to columnar data types."""

from __future__ import annotations

import re
from typing import Any, Optional, Tuple

from arrowsqlgen.datatypes import DataType, Field, IntervalUnit, TimeUnit, TypeId

_DEFAULT_NUMERIC = (38, 20)
_UNSIGNED = re.compile(r"\+?[0-9]+")
_SIGNED = re.compile(r"[+-]?[0-9]+")


class SchemaParseError(ValueError):
    """Raised when a Postgres type cannot be mapped to a data type."""


def _simple(type_id: TypeId) -> DataType:
    return DataType(type_id)


def _list_of(inner: DataType) -> DataType:
    return DataType(TypeId.LIST, item=Field("item", inner, True))


_SIMPLE_TYPES = {
    "smallint": TypeId.INT16,
    "integer": TypeId.INT32,
    "int": TypeId.INT32,
    "int4": TypeId.INT32,
    "bigint": TypeId.INT64,
    "int8": TypeId.INT64,
    "money": TypeId.INT64,
    "real": TypeId.FLOAT32,
    "float4": TypeId.FLOAT32,
    "double precision": TypeId.FLOAT64,
    "float8": TypeId.FLOAT64,
    "character": TypeId.UTF8,
    "char": TypeId.UTF8,
    "character varying": TypeId.UTF8,
    "varchar": TypeId.UTF8,
    "text": TypeId.UTF8,
    "bpchar": TypeId.UTF8,
    "uuid": TypeId.UTF8,
    "bytea": TypeId.BINARY,
    "date": TypeId.DATE32,
    "boolean": TypeId.BOOLEAN,
    "line": TypeId.BINARY,
    "lseg": TypeId.BINARY,
    "box": TypeId.BINARY,
    "path": TypeId.BINARY,
    "polygon": TypeId.BINARY,
    "circle": TypeId.BINARY,
    "inet": TypeId.UTF8,
    "cidr": TypeId.UTF8,
    "macaddr": TypeId.UTF8,
    "bit": TypeId.BINARY,
    "bit varying": TypeId.BINARY,
    "tsvector": TypeId.LARGE_UTF8,
    "tsquery": TypeId.LARGE_UTF8,
    "xml": TypeId.LARGE_UTF8,
    "json": TypeId.LARGE_UTF8,
    "jsonb": TypeId.LARGE_UTF8,
    "geometry": TypeId.BINARY,
    "geography": TypeId.BINARY,
}


def pg_data_type_to_arrow_type(pg_type: str, type_details: Optional[Any] = None) -> DataType:
    """Map a Postgres type name (with optional JSON-like details) to a data type."""
    base_type = pg_type.split("(", 1)[0].strip()

    simple = _SIMPLE_TYPES.get(base_type)
    if simple is not None:
        return _simple(simple)
    if base_type in ("numeric", "decimal"):
        precision, scale = parse_numeric_type(pg_type)
        return DataType(TypeId.DECIMAL128, precision=precision, scale=scale)
    if base_type in ("time", "time without time zone"):
        return DataType(TypeId.TIME64, unit=TimeUnit.NANOSECOND)
    if base_type in ("timestamp", "timestamp without time zone"):
        return DataType(TypeId.TIMESTAMP, unit=TimeUnit.NANOSECOND)
    if base_type in ("timestamp with time zone", "timestamptz"):
        return DataType(TypeId.TIMESTAMP, unit=TimeUnit.NANOSECOND, timezone="UTC")
    if base_type == "interval":
        return DataType(TypeId.INTERVAL, unit=IntervalUnit.MONTH_DAY_NANO)
    if base_type == "enum":
        return DataType(TypeId.DICTIONARY, key=_simple(TypeId.INT8), value=_simple(TypeId.UTF8))
    if base_type == "point":
        return DataType(
            TypeId.FIXED_SIZE_LIST,
            item=Field("item", _simple(TypeId.FLOAT64), True),
            size=2,
        )
    if base_type == "array":
        return parse_array_type(type_details)
    if base_type == "int4range":
        return DataType(
            TypeId.STRUCT,
            fields=(
                Field("lower", _simple(TypeId.INT32), True),
                Field("upper", _simple(TypeId.INT32), True),
            ),
        )
    if base_type == "composite":
        return parse_composite_type(type_details)
    raise SchemaParseError(f"Unsupported PostgreSQL type: {pg_type}")


def parse_array_type(type_details: Optional[Any]) -> DataType:
    """Map array details (``{"element_type": ...}``) to a list type."""
    if type_details is None:
        raise SchemaParseError("Missing type details for array type")
    if not isinstance(type_details, dict):
        raise SchemaParseError("Invalid array type details format")
    element_type = type_details.get("element_type")
    if not isinstance(element_type, str):
        raise SchemaParseError("Missing or invalid element_type for array")

    if element_type.endswith("[]"):
        stripped = element_type
        while stripped.endswith("[]"):
            stripped = stripped[:-2]
        inner = parse_array_type({"type": "array", "element_type": stripped})
    else:
        inner = pg_data_type_to_arrow_type(element_type, None)
    return _list_of(inner)


def _parse_attribute(attr: Any) -> Field:
    if not isinstance(attr, dict):
        raise SchemaParseError("Invalid attribute format in composite type")
    name = attr.get("name")
    if not isinstance(name, str):
        raise SchemaParseError("Missing or invalid name in composite type attribute")
    attr_type = attr.get("type")
    if not isinstance(attr_type, str):
        raise SchemaParseError("Missing or invalid type in composite type attribute")
    if attr_type == "composite":
        field_type = parse_composite_type(attr)
    else:
        field_type = pg_data_type_to_arrow_type(attr_type, None)
    return Field(name, field_type, True)


def parse_composite_type(type_details: Optional[Any]) -> DataType:
    """Map composite details (``{"attributes": [...]}``) to a struct type."""
    if type_details is None:
        raise SchemaParseError("Missing type details for composite type")
    if not isinstance(type_details, dict):
        raise SchemaParseError("Invalid composite type details format")
    attributes = type_details.get("attributes")
    if not isinstance(attributes, list):
        raise SchemaParseError("Missing or invalid attributes for composite type")
    return DataType(TypeId.STRUCT, fields=tuple(_parse_attribute(a) for a in attributes))


def _strip_prefix_repeated(text: str, prefix: str) -> str:
    while text.startswith(prefix):
        text = text[len(prefix):]
    return text


def _parse_int(text: str, pattern: re.Pattern, low: int, high: int, message: str) -> int:
    if not pattern.fullmatch(text):
        raise SchemaParseError(message)
    value = int(text)
    if not low <= value <= high:
        raise SchemaParseError(message)
    return value


def parse_numeric_type(pg_type: str) -> Tuple[int, int]:
    """Return ``(precision, scale)`` of a ``numeric``/``decimal`` type name."""
    type_str = _strip_prefix_repeated(pg_type, "numeric")
    type_str = _strip_prefix_repeated(type_str, "decimal").strip()

    if type_str in ("", "()"):
        return _DEFAULT_NUMERIC

    inner = type_str.lstrip("(").rstrip(")")
    parts = inner.split(",")

    if len(parts) == 1:
        precision = _parse_int(
            parts[0].strip(), _UNSIGNED, 0, 255, "Invalid numeric precision"
        )
        return precision, 0
    if len(parts) == 2:
        precision = _parse_int(
            parts[0].strip(), _UNSIGNED, 0, 255, "Invalid numeric precision"
        )
        scale = _parse_int(parts[1].strip(), _SIGNED, -128, 127, "Invalid numeric scale")
        return precision, scale
    raise SchemaParseError("Invalid numeric type format")