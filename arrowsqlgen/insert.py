"""INSERT statements built from record batches."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from arrowsqlgen.coltypes import Dialect, quote_identifier, quote_string
from arrowsqlgen.datatypes import DataType, IntervalUnit, RecordBatch, TimeUnit, TypeId

_NANOS_PER_SECOND = 1_000_000_000
_SECONDS_PER_DAY = 86_400
_EPOCH = datetime(1970, 1, 1)

_INTEGER_TYPES = frozenset(
    {
        TypeId.INT8,
        TypeId.INT16,
        TypeId.INT32,
        TypeId.INT64,
        TypeId.UINT8,
        TypeId.UINT16,
        TypeId.UINT32,
        TypeId.UINT64,
    }
)
_FLOAT_TYPES = frozenset({TypeId.FLOAT32, TypeId.FLOAT64})
_STRING_TYPES = frozenset({TypeId.UTF8, TypeId.LARGE_UTF8})
_BINARY_TYPES = frozenset({TypeId.BINARY, TypeId.LARGE_BINARY, TypeId.FIXED_SIZE_BINARY})
_LIST_TYPES = frozenset({TypeId.LIST, TypeId.LARGE_LIST, TypeId.FIXED_SIZE_LIST})

_LIST_CASTS = {
    TypeId.INT8: "int2[]",
    TypeId.INT16: "int2[]",
    TypeId.INT32: "int4[]",
    TypeId.INT64: "int8[]",
    TypeId.FLOAT32: "float4[]",
    TypeId.FLOAT64: "float8[]",
    TypeId.UTF8: "text[]",
    TypeId.LARGE_UTF8: "text[]",
    TypeId.BOOLEAN: "boolean[]",
    TypeId.BINARY: "bytea[]",
}

_JSON_LIST_ITEMS = (_INTEGER_TYPES | _FLOAT_TYPES | _STRING_TYPES) | {TypeId.BOOLEAN}

_STRUCT_CHILD_TYPES = (
    _INTEGER_TYPES | _FLOAT_TYPES | _STRING_TYPES | _BINARY_TYPES | {TypeId.BOOLEAN, TypeId.NULL}
)


class InsertError(Exception):
    """Raised when a record batch cannot be turned into an insert statement."""


@dataclass(frozen=True)
class OnConflict:
    """What to do when an inserted row conflicts on ``columns``.

    With no ``update_columns`` the conflicting row is left alone; otherwise
    the listed columns are overwritten with the incoming values.
    """

    columns: Tuple[str, ...] = ()
    update_columns: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "update_columns", tuple(self.update_columns))

    @classmethod
    def do_nothing(cls, columns: Iterable[str]) -> "OnConflict":
        return cls(tuple(columns))

    @classmethod
    def update(cls, columns: Iterable[str], update_columns: Iterable[str]) -> "OnConflict":
        return cls(tuple(columns), tuple(update_columns))

    def render(self, dialect: Dialect) -> str:
        """Render the clause, including its leading space."""
        if dialect is Dialect.MYSQL:
            targets = self.update_columns or self.columns
            if not targets:
                raise InsertError(
                    "Failed to build insert statement: MySQL needs conflict columns"
                )
            if self.update_columns:
                sets = (
                    f"{quote_identifier(c, dialect)} = VALUES({quote_identifier(c, dialect)})"
                    for c in targets
                )
            else:
                sets = (
                    f"{quote_identifier(c, dialect)} = {quote_identifier(c, dialect)}"
                    for c in targets
                )
            return f" ON DUPLICATE KEY UPDATE {', '.join(sets)}"

        clause = " ON CONFLICT"
        if self.columns:
            clause += f" ({', '.join(quote_identifier(c, dialect) for c in self.columns)})"
        if not self.update_columns:
            return clause + " DO NOTHING"
        excluded = quote_identifier("excluded", dialect)
        sets = ", ".join(
            f"{quote_identifier(c, dialect)} = {excluded}.{quote_identifier(c, dialect)}"
            for c in self.update_columns
        )
        return f"{clause} DO UPDATE SET {sets}"


def use_json_insert_for_type(data_type: DataType, dialect: Dialect) -> bool:
    """SQLite stores nested values as JSON text."""
    return dialect is Dialect.SQLITE and data_type.is_nested()


def parse_fixed_offset(tz: str) -> Optional[timezone]:
    """Parse ``+HH:MM``, ``+HHMM`` or ``+HH`` (or ``-``) into a fixed offset."""
    raw = tz.encode()
    if len(raw) == 6 and raw[3:4] == b":":
        digits = raw[1:3] + raw[4:6]
    elif len(raw) == 5:
        digits = raw[1:5]
    elif len(raw) == 3:
        digits = raw[1:3] + b"00"
    else:
        return None
    values = [(b - ord("0")) & 0xFF for b in digits]
    if any(v > 9 for v in values):
        return None
    secs = (values[0] * 10 + values[1]) * 3600 + (values[2] * 10 + values[3]) * 60
    if secs >= _SECONDS_PER_DAY:
        return None
    sign = raw[0:1]
    if sign == b"+":
        return timezone(timedelta(seconds=secs))
    if sign == b"-":
        return timezone(timedelta(seconds=-secs))
    return None


def _subsecond(nanos: int) -> str:
    return f"{nanos:09d}".rstrip("0") or "0"


def _render_float(value: float) -> str:
    if value != value or value in (float("inf"), float("-inf")):
        return str(value)
    if float(value).is_integer():
        return str(int(value))
    return format(Decimal(repr(float(value))), "f")


def _render_bytes(value: bytes, dialect: Dialect) -> str:
    hex_digits = bytes(value).hex().upper()
    if dialect is Dialect.POSTGRES:
        return f"'\\x{hex_digits}'"
    return f"x'{hex_digits}'"


def _render_decimal(value: Any, scale: int) -> str:
    if isinstance(value, Decimal):
        return format(value, "f")
    return format(Decimal(int(value)).scaleb(-scale), "f")


def _render_scalar(value: Any, type_id: TypeId, dialect: Dialect) -> str:
    if value is None or type_id is TypeId.NULL:
        return "NULL"
    if type_id in _INTEGER_TYPES:
        return str(int(value))
    if type_id in _FLOAT_TYPES:
        return _render_float(value)
    if type_id in _STRING_TYPES:
        return quote_string(value, dialect)
    if type_id is TypeId.BOOLEAN:
        return "TRUE" if value else "FALSE"
    if type_id in _BINARY_TYPES:
        return _render_bytes(value, dialect)
    raise NotImplementedError(f"Data type mapping not implemented for {type_id.value}")


def _render_time_of_day(total_nanos: int) -> str:
    nanos_of_day = total_nanos % (_SECONDS_PER_DAY * _NANOS_PER_SECOND)
    seconds, nanos = divmod(nanos_of_day, _NANOS_PER_SECOND)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"'{hours:02d}:{minutes:02d}:{secs:02d}.{_subsecond(nanos)}'"


def _to_nanos(value: int, unit: TimeUnit) -> int:
    factor = {
        TimeUnit.SECOND: _NANOS_PER_SECOND,
        TimeUnit.MILLISECOND: 1_000_000,
        TimeUnit.MICROSECOND: 1_000,
        TimeUnit.NANOSECOND: 1,
    }[unit]
    return int(value) * factor


def _format_offset(offset: timezone) -> str:
    total = int(offset.utcoffset(None).total_seconds())
    sign = "+" if total >= 0 else "-"
    hours, minutes = divmod(abs(total) // 60, 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def _render_timestamp(value: int, data_type: DataType) -> str:
    seconds, nanos = divmod(_to_nanos(value, data_type.unit), _NANOS_PER_SECOND)
    if data_type.timezone is not None:
        offset = parse_fixed_offset(data_type.timezone)
        if offset is None:
            raise InsertError(
                "Failed to build insert statement: Unable to parse arrow timezone information"
            )
        try:
            local = _EPOCH + timedelta(seconds=seconds) + offset.utcoffset(None)
        except OverflowError as exc:
            raise InsertError(f"Failed to build insert statement: {exc}") from exc
        return f"'{local:%Y-%m-%d %H:%M:%S} {_format_offset(offset)}'"
    try:
        moment = _EPOCH + timedelta(seconds=seconds)
    except OverflowError as exc:
        raise InsertError(f"Failed to build insert statement: {exc}") from exc
    return f"'{moment:%Y-%m-%d %H:%M:%S}.{_subsecond(nanos)}'"


def _date_from_seconds(seconds: int) -> date:
    try:
        return (_EPOCH + timedelta(seconds=seconds)).date()
    except OverflowError as exc:
        raise InsertError(f"Failed to build insert statement: {exc}") from exc


def _render_date(value: Any, type_id: TypeId) -> str:
    if isinstance(value, datetime):
        value = value.date()
    if not isinstance(value, date):
        if type_id is TypeId.DATE32:
            value = _date_from_seconds(int(value) * _SECONDS_PER_DAY)
        else:
            millis = int(value)
            seconds = abs(millis) // 1000
            value = _date_from_seconds(seconds if millis >= 0 else -seconds)
    return f"'{value.isoformat()}'"


def _render_interval(value: Any, unit: IntervalUnit, dialect: Dialect) -> str:
    if unit is IntervalUnit.YEAR_MONTH:
        text = f"{int(value)} months"
    elif unit is IntervalUnit.DAY_TIME:
        days, milliseconds = value
        text = f"{days} days {milliseconds} milliseconds"
    else:
        months, days, nanoseconds = value
        micros = int(nanoseconds / 1_000)
        text = f"{months} months {days} days {micros} microseconds"
    return quote_string(text, dialect)


def _json_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    if isinstance(value, dict):
        return {k: _json_value(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_json_value(v) for v in value]
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)


def _render_list(values: Sequence[Any], data_type: DataType, dialect: Dialect) -> str:
    item_type = data_type.item.data_type.id
    if use_json_insert_for_type(data_type, dialect):
        if item_type not in _JSON_LIST_ITEMS:
            raise NotImplementedError(
                f"List to json conversion is not implemented for {data_type.item.data_type}"
            )
        text = json.dumps(list(values), separators=(",", ":"))
        return quote_string(text, dialect)
    cast = _LIST_CASTS.get(item_type)
    if cast is None:
        raise NotImplementedError(
            f"Data type mapping not implemented for {data_type.item.data_type}"
        )
    items = ",".join(_render_scalar(v, item_type, dialect) for v in values)
    return f"CAST(ARRAY [{items}] AS {cast})"


def _render_struct(value: Any, data_type: DataType, dialect: Dialect) -> str:
    if use_json_insert_for_type(data_type, dialect):
        document = {
            f.name: _json_value(value.get(f.name))
            for f in data_type.fields
            if value.get(f.name) is not None
        }
        return quote_string(json.dumps(document, separators=(",", ":")) + "\n", dialect)
    params = []
    for child in data_type.fields:
        if child.data_type.id not in _STRUCT_CHILD_TYPES:
            raise NotImplementedError(
                f"Data type mapping not implemented for Struct of {child.data_type}"
            )
        params.append(_render_scalar(value.get(child.name), child.data_type.id, dialect))
    return f"ROW({', '.join(params)})"


def _render_value(value: Any, data_type: DataType, dialect: Dialect) -> str:
    type_id = data_type.id
    if value is None:
        if type_id is TypeId.NULL or type_id is TypeId.FLOAT16 or type_id is TypeId.DICTIONARY:
            raise InsertError(f"Unimplemented data type in insert statement: {data_type}")
        return "NULL"
    if type_id in _INTEGER_TYPES or type_id in _FLOAT_TYPES or type_id in _STRING_TYPES:
        return _render_scalar(value, type_id, dialect)
    if type_id is TypeId.BOOLEAN or type_id in _BINARY_TYPES:
        return _render_scalar(value, type_id, dialect)
    if type_id is TypeId.DURATION:
        return str(int(value))
    if type_id in (TypeId.DECIMAL128, TypeId.DECIMAL256):
        return _render_decimal(value, data_type.scale)
    if type_id in (TypeId.DATE32, TypeId.DATE64):
        return _render_date(value, type_id)
    if type_id is TypeId.TIME32:
        if data_type.unit not in (TimeUnit.SECOND, TimeUnit.MILLISECOND):
            raise ValueError(f"{data_type} is not a valid Time32 type")
        return _render_time_of_day(_to_nanos(value, data_type.unit))
    if type_id is TypeId.TIME64:
        if data_type.unit not in (TimeUnit.MICROSECOND, TimeUnit.NANOSECOND):
            raise ValueError(f"{data_type} is not a valid Time64 type")
        return _render_time_of_day(_to_nanos(value, data_type.unit))
    if type_id is TypeId.TIMESTAMP:
        return _render_timestamp(value, data_type)
    if type_id in _LIST_TYPES:
        return _render_list(value, data_type, dialect)
    if type_id is TypeId.INTERVAL:
        return _render_interval(value, data_type.unit, dialect)
    if type_id is TypeId.STRUCT:
        return _render_struct(value, data_type, dialect)
    raise InsertError(f"Unimplemented data type in insert statement: {data_type}")


class InsertBuilder:
    """Builds one multi-row INSERT statement from record batches.

    Column names come from the first batch; every batch must supply values
    for the same number of columns.
    """

    def __init__(self, table_name: str, record_batches: Iterable[RecordBatch]) -> None:
        self.table_name = table_name
        self.record_batches: List[RecordBatch] = list(record_batches)

    def build_postgres(self, on_conflict: Optional[OnConflict] = None) -> str:
        return self.build(Dialect.POSTGRES, on_conflict)

    def build_sqlite(self, on_conflict: Optional[OnConflict] = None) -> str:
        return self.build(Dialect.SQLITE, on_conflict)

    def build_mysql(self, on_conflict: Optional[OnConflict] = None) -> str:
        return self.build(Dialect.MYSQL, on_conflict)

    def _rows(self, dialect: Dialect, column_count: int) -> List[str]:
        rows = []
        for batch in self.record_batches:
            types = [f.data_type for f in batch.schema]
            for row in batch.rows():
                values = [_render_value(v, t, dialect) for v, t in zip(row, types)]
                if len(values) != column_count:
                    raise InsertError(
                        "Failed to build insert statement: "
                        "Number of values does not match number of columns"
                    )
                rows.append(f"({', '.join(values)})")
        return rows

    def build(self, dialect: Dialect, on_conflict: Optional[OnConflict] = None) -> str:
        """Render the statement; stops at the first batch that cannot be converted."""
        if not self.record_batches:
            raise ValueError("at least one record batch is required")
        names = self.record_batches[0].schema.names
        rows = self._rows(dialect, len(names))
        if not rows:
            raise InsertError("Failed to build insert statement: no rows to insert")
        columns = ", ".join(quote_identifier(name, dialect) for name in names)
        sql = (
            f"INSERT INTO {quote_identifier(self.table_name, dialect)} ({columns}) "
            f"VALUES {', '.join(rows)}"
        )
        if on_conflict is not None:
            sql += on_conflict.render(dialect)
        return sql