"""SQL column types, their mapping from data types, and per-dialect rendering."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from arrowsqlgen.datatypes import DataType, TypeId


class Dialect(Enum):
    """SQL dialects that statements can be rendered for."""

    POSTGRES = "postgres"
    SQLITE = "sqlite"
    MYSQL = "mysql"


_KINDS = frozenset(
    {
        "TinyInteger",
        "SmallInteger",
        "Integer",
        "BigInteger",
        "TinyUnsigned",
        "SmallUnsigned",
        "Unsigned",
        "BigUnsigned",
        "Float",
        "Double",
        "Text",
        "Boolean",
        "Decimal",
        "Timestamp",
        "TimestampWithTimeZone",
        "Date",
        "Time",
        "Interval",
        "Array",
        "Binary",
        "VarBinary",
        "Json",
        "JsonBinary",
        "Custom",
    }
)


@dataclass(frozen=True)
class ColumnType:
    """A dialect-independent SQL column type.

    ``kind`` names the type; ``precision``/``scale`` belong to ``Decimal``,
    ``length`` to ``Binary`` and ``VarBinary`` (``None`` meaning unbounded),
    ``element`` to ``Array`` and ``name`` to ``Custom``.
    """

    kind: str
    precision: Optional[int] = None
    scale: Optional[int] = None
    length: Optional[int] = None
    element: Optional["ColumnType"] = None
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind not in _KINDS:
            raise ValueError(f"unknown column type kind: {self.kind!r}")
        if (self.precision is None) != (self.scale is None):
            raise ValueError("precision and scale must be given together")
        if self.kind == "Binary" and self.length is None:
            raise ValueError("Binary requires a length")
        if self.kind == "Array" and self.element is None:
            raise ValueError("Array requires an element type")
        if self.kind == "Custom" and not self.name:
            raise ValueError("Custom requires a name")

    @classmethod
    def decimal(cls, precision: Optional[int] = None, scale: Optional[int] = None) -> "ColumnType":
        return cls("Decimal", precision=precision, scale=scale)

    @classmethod
    def array(cls, element: "ColumnType") -> "ColumnType":
        return cls("Array", element=element)

    @classmethod
    def binary(cls, length: int) -> "ColumnType":
        return cls("Binary", length=length)

    @classmethod
    def var_binary(cls, length: Optional[int] = None) -> "ColumnType":
        return cls("VarBinary", length=length)

    @classmethod
    def custom(cls, name: str) -> "ColumnType":
        return cls("Custom", name=name)


_SIMPLE_MAPPING = {
    TypeId.INT8: "TinyInteger",
    TypeId.INT16: "SmallInteger",
    TypeId.INT32: "Integer",
    TypeId.INT64: "BigInteger",
    TypeId.DURATION: "BigInteger",
    TypeId.UINT8: "TinyUnsigned",
    TypeId.UINT16: "SmallUnsigned",
    TypeId.UINT32: "Unsigned",
    TypeId.UINT64: "BigUnsigned",
    TypeId.FLOAT32: "Float",
    TypeId.FLOAT64: "Double",
    TypeId.UTF8: "Text",
    TypeId.LARGE_UTF8: "Text",
    TypeId.BOOLEAN: "Boolean",
    TypeId.DATE32: "Date",
    TypeId.DATE64: "Date",
    TypeId.TIME32: "Time",
    TypeId.TIME64: "Time",
    TypeId.INTERVAL: "Interval",
}


def map_data_type_to_column_type(data_type: DataType) -> ColumnType:
    """Map a data type to the SQL column type that stores it."""
    kind = _SIMPLE_MAPPING.get(data_type.id)
    if kind is not None:
        return ColumnType(kind)
    if data_type.id in (TypeId.DECIMAL128, TypeId.DECIMAL256):
        return ColumnType.decimal(data_type.precision, data_type.scale)
    if data_type.id is TypeId.TIMESTAMP:
        if data_type.timezone is not None:
            return ColumnType("TimestampWithTimeZone")
        return ColumnType("Timestamp")
    if data_type.id in (TypeId.LIST, TypeId.LARGE_LIST, TypeId.FIXED_SIZE_LIST):
        return ColumnType.array(map_data_type_to_column_type(data_type.item.data_type))
    if data_type.id in (TypeId.BINARY, TypeId.LARGE_BINARY):
        return ColumnType.var_binary()
    if data_type.id is TypeId.FIXED_SIZE_BINARY:
        return ColumnType.binary(data_type.size)
    raise NotImplementedError(f"Data type mapping not implemented for {data_type}")


_POSTGRES_NAMES = {
    "TinyInteger": "smallint",
    "TinyUnsigned": "smallint",
    "SmallInteger": "smallint",
    "SmallUnsigned": "smallint",
    "Integer": "integer",
    "Unsigned": "integer",
    "BigInteger": "bigint",
    "BigUnsigned": "bigint",
    "Float": "real",
    "Double": "double precision",
    "Text": "text",
    "Boolean": "bool",
    "Timestamp": "timestamp",
    "TimestampWithTimeZone": "timestamp with time zone",
    "Date": "date",
    "Time": "time",
    "Interval": "interval",
    "Json": "json",
    "JsonBinary": "jsonb",
    "Binary": "bytea",
    "VarBinary": "bytea",
}

_SQLITE_NAMES = {
    "TinyInteger": "tinyint",
    "TinyUnsigned": "tinyint",
    "SmallInteger": "smallint",
    "SmallUnsigned": "smallint",
    "Integer": "integer",
    "Unsigned": "integer",
    "BigInteger": "bigint",
    "BigUnsigned": "bigint",
    "Float": "float",
    "Double": "double",
    "Text": "text",
    "Boolean": "boolean",
    "Timestamp": "timestamp_text",
    "TimestampWithTimeZone": "timestamp_with_timezone_text",
    "Date": "date_text",
    "Time": "time_text",
    "Json": "json_text",
    "JsonBinary": "jsonb_text",
}

_MYSQL_NAMES = {
    "TinyInteger": "tinyint",
    "TinyUnsigned": "tinyint UNSIGNED",
    "SmallInteger": "smallint",
    "SmallUnsigned": "smallint UNSIGNED",
    "Integer": "int",
    "Unsigned": "int UNSIGNED",
    "BigInteger": "bigint",
    "BigUnsigned": "bigint UNSIGNED",
    "Float": "float",
    "Double": "double",
    "Text": "text",
    "Boolean": "bool",
    "Timestamp": "timestamp",
    "TimestampWithTimeZone": "timestamp",
    "Date": "date",
    "Time": "time",
    "Json": "json",
    "JsonBinary": "json",
}

_NAMES = {
    Dialect.POSTGRES: _POSTGRES_NAMES,
    Dialect.SQLITE: _SQLITE_NAMES,
    Dialect.MYSQL: _MYSQL_NAMES,
}


def _render_decimal(column_type: ColumnType, dialect: Dialect) -> str:
    if dialect is Dialect.SQLITE:
        if column_type.precision is None:
            return "real"
        if column_type.precision > 16:
            raise ValueError("precision cannot be larger than 16")
        return f"real({column_type.precision}, {column_type.scale})"
    if column_type.precision is None:
        return "decimal"
    return f"decimal({column_type.precision}, {column_type.scale})"


def render_column_type(column_type: ColumnType, dialect: Dialect) -> str:
    """Render a column type as SQL for the given dialect."""
    kind = column_type.kind
    if kind == "Custom":
        return column_type.name
    if kind == "Decimal":
        return _render_decimal(column_type, dialect)
    if kind == "Array":
        if dialect is not Dialect.POSTGRES:
            raise NotImplementedError(f"Array columns are not supported by {dialect.value}")
        return f"{render_column_type(column_type.element, dialect)}[]"
    if dialect is Dialect.SQLITE and kind == "Binary":
        return f"blob({column_type.length})"
    if dialect is Dialect.SQLITE and kind == "VarBinary":
        if column_type.length is None:
            return "varbinary_blob"
        return f"varbinary_blob({column_type.length})"
    if dialect is Dialect.MYSQL and kind == "Binary":
        return f"binary({column_type.length})"
    if dialect is Dialect.MYSQL and kind == "VarBinary":
        return f"varbinary({65535 if column_type.length is None else column_type.length})"
    try:
        return _NAMES[dialect][kind]
    except KeyError:
        raise NotImplementedError(
            f"{kind} columns are not supported by {dialect.value}"
        ) from None


def quote_identifier(name: str, dialect: Dialect) -> str:
    """Quote a table, column or index name for the given dialect."""
    quote = "`" if dialect is Dialect.MYSQL else '"'
    return f"{quote}{name.replace(quote, quote * 2)}{quote}"


_BACKSLASH_ESCAPES = (
    ("\\", "\\\\"),
    ('"', '\\"'),
    ("'", "\\'"),
    ("\0", "\\0"),
    ("\b", "\\b"),
    ("\t", "\\t"),
    ("\x1a", "\\z"),
    ("\n", "\\n"),
    ("\r", "\\r"),
)


def _backslash_escape(value: str) -> str:
    for raw, escaped in _BACKSLASH_ESCAPES:
        value = value.replace(raw, escaped)
    return value


def quote_string(value: str, dialect: Dialect) -> str:
    """Render a string literal for the given dialect."""
    if dialect is Dialect.SQLITE:
        return "'" + value.replace("'", "''") + "'"
    escaped = _backslash_escape(value)
    if dialect is Dialect.POSTGRES and "\\" in escaped:
        return f"E'{escaped}'"
    return f"'{escaped}'"