"""Conversion of SQLite query results into record batches."""

from __future__ import annotations

import sqlite3
from enum import Enum
from typing import Any, Iterable, Iterator, List, Optional, Sequence

from arrowsqlgen.datatypes import DataType, Field, RecordBatch, Schema, TypeId


class SqliteConversionError(Exception):
    """Raised when SQLite rows cannot be turned into a record batch."""


class _SqliteType(Enum):
    NULL = "Null"
    INTEGER = "Integer"
    REAL = "Real"
    TEXT = "Text"
    BLOB = "Blob"


_DATA_TYPES = {
    _SqliteType.NULL: TypeId.NULL,
    _SqliteType.INTEGER: TypeId.INT64,
    _SqliteType.REAL: TypeId.FLOAT64,
    _SqliteType.TEXT: TypeId.UTF8,
    _SqliteType.BLOB: TypeId.BINARY,
}

_FLOATING = frozenset({TypeId.DECIMAL128, TypeId.FLOAT16, TypeId.FLOAT32, TypeId.FLOAT64})


def _storage_type(value: Any) -> _SqliteType:
    if value is None:
        return _SqliteType.NULL
    if isinstance(value, int):
        return _SqliteType.INTEGER
    if isinstance(value, float):
        return _SqliteType.REAL
    if isinstance(value, str):
        return _SqliteType.TEXT
    return _SqliteType.BLOB


def _value_at(row: Sequence[Any], index: int) -> Any:
    try:
        return row[index]
    except IndexError:
        raise SqliteConversionError(
            f"Failed to extract row value: Invalid column index: {index}"
        ) from None


def _column_names(rows: Any, num_cols: int) -> List[str]:
    description = getattr(rows, "description", None)
    if description is None or len(description) < num_cols:
        raise SqliteConversionError(
            f"Failed to extract column name: Invalid column index: {len(description or ())}"
        )
    return [column[0] for column in description[:num_cols]]


def _iter_rows(rows: Iterable[Sequence[Any]]) -> Iterator[Sequence[Any]]:
    iterator = iter(rows)
    while True:
        try:
            yield next(iterator)
        except (StopIteration, sqlite3.Error):
            return


def _convert(value: Any, sqlite_type: _SqliteType, index: int, name: str) -> Any:
    if sqlite_type is _SqliteType.NULL or value is None:
        return None
    actual = _storage_type(value)
    if sqlite_type is _SqliteType.INTEGER and actual is _SqliteType.INTEGER:
        return int(value)
    if sqlite_type is _SqliteType.REAL and actual in (_SqliteType.INTEGER, _SqliteType.REAL):
        return float(value)
    if sqlite_type is _SqliteType.TEXT and actual is _SqliteType.TEXT:
        return value
    if sqlite_type is _SqliteType.BLOB and actual is _SqliteType.BLOB:
        return bytes(value)
    raise SqliteConversionError(
        f"Failed to extract row value: Invalid column type {actual.value} "
        f"at index: {index}, name: {name}"
    )


def rows_to_arrow(
    rows: Iterable[Sequence[Any]],
    num_cols: int,
    projected_schema: Optional[Schema] = None,
) -> RecordBatch:
    """Convert rows from a SQLite cursor into a record batch.

    Column types are taken from the values in the first row. An integer
    column whose projected type is a float or decimal is read as floats.
    """
    row_iter = _iter_rows(rows)
    first = next(row_iter, None)
    if first is None:
        return RecordBatch(Schema(()), (), 0)

    names = _column_names(rows, num_cols)
    sqlite_types: List[_SqliteType] = []
    fields: List[Field] = []
    for index in range(num_cols):
        column_type = _storage_type(_value_at(first, index))
        if column_type is _SqliteType.INTEGER and projected_schema is not None:
            if projected_schema[index].data_type.id in _FLOATING:
                column_type = _SqliteType.REAL
        sqlite_types.append(column_type)
        fields.append(Field(names[index], DataType(_DATA_TYPES[column_type]), True))

    columns: List[List[Any]] = [[] for _ in range(num_cols)]
    row_count = 0
    for row in _prepend(first, row_iter):
        for index, sqlite_type in enumerate(sqlite_types):
            value = _value_at(row, index)
            columns[index].append(_convert(value, sqlite_type, index, names[index]))
        row_count += 1

    try:
        return RecordBatch(Schema(tuple(fields)), tuple(tuple(c) for c in columns), row_count)
    except ValueError as exc:
        raise SqliteConversionError(f"Failed to build record batch: {exc}") from exc


def _prepend(first: Sequence[Any], rest: Iterator[Sequence[Any]]) -> Iterator[Sequence[Any]]:
    yield first
    yield from rest