"""A small columnar type system: data types, fields, schemas and record batches."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator, Optional, Sequence, Tuple


class TypeId(Enum):
    """The kind of a data type."""

    NULL = "Null"
    BOOLEAN = "Boolean"
    INT8 = "Int8"
    INT16 = "Int16"
    INT32 = "Int32"
    INT64 = "Int64"
    UINT8 = "UInt8"
    UINT16 = "UInt16"
    UINT32 = "UInt32"
    UINT64 = "UInt64"
    FLOAT16 = "Float16"
    FLOAT32 = "Float32"
    FLOAT64 = "Float64"
    UTF8 = "Utf8"
    LARGE_UTF8 = "LargeUtf8"
    UTF8_VIEW = "Utf8View"
    BINARY = "Binary"
    LARGE_BINARY = "LargeBinary"
    FIXED_SIZE_BINARY = "FixedSizeBinary"
    BINARY_VIEW = "BinaryView"
    DATE32 = "Date32"
    DATE64 = "Date64"
    TIME32 = "Time32"
    TIME64 = "Time64"
    TIMESTAMP = "Timestamp"
    DURATION = "Duration"
    INTERVAL = "Interval"
    DECIMAL128 = "Decimal128"
    DECIMAL256 = "Decimal256"
    LIST = "List"
    LARGE_LIST = "LargeList"
    FIXED_SIZE_LIST = "FixedSizeList"
    LIST_VIEW = "ListView"
    LARGE_LIST_VIEW = "LargeListView"
    STRUCT = "Struct"
    UNION = "Union"
    DICTIONARY = "Dictionary"
    MAP = "Map"
    RUN_END_ENCODED = "RunEndEncoded"


class TimeUnit(Enum):
    """Resolution of time, timestamp and duration values."""

    SECOND = "Second"
    MILLISECOND = "Millisecond"
    MICROSECOND = "Microsecond"
    NANOSECOND = "Nanosecond"


class IntervalUnit(Enum):
    """Layout of interval values."""

    YEAR_MONTH = "YearMonth"
    DAY_TIME = "DayTime"
    MONTH_DAY_NANO = "MonthDayNano"


_LIST_LIKE = frozenset(
    {
        TypeId.LIST,
        TypeId.LARGE_LIST,
        TypeId.FIXED_SIZE_LIST,
        TypeId.LIST_VIEW,
        TypeId.LARGE_LIST_VIEW,
    }
)

_ALWAYS_NESTED = _LIST_LIKE | {TypeId.STRUCT, TypeId.UNION, TypeId.MAP}


@dataclass(frozen=True)
class DataType:
    """A logical data type.

    Parameters beyond ``id`` are only meaningful for the kinds that use them:
    ``unit`` for time, timestamp, duration and interval types; ``timezone`` for
    timestamps; ``precision``/``scale`` for decimals; ``size`` for fixed-size
    binaries and lists; ``item`` for list-like and run-end encoded types;
    ``fields`` for structs, unions and maps; ``key``/``value`` for dictionaries.
    """

    id: TypeId
    unit: Optional[Enum] = None
    timezone: Optional[str] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    size: Optional[int] = None
    item: Optional["Field"] = None
    fields: Tuple["Field", ...] = ()
    key: Optional["DataType"] = None
    value: Optional["DataType"] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        if self.id in (TypeId.TIME32, TypeId.TIME64, TypeId.TIMESTAMP, TypeId.DURATION):
            if not isinstance(self.unit, TimeUnit):
                raise ValueError(f"{self.id.value} requires a TimeUnit")
        if self.id is TypeId.INTERVAL and not isinstance(self.unit, IntervalUnit):
            raise ValueError("Interval requires an IntervalUnit")
        if self.id in (TypeId.DECIMAL128, TypeId.DECIMAL256):
            if self.precision is None or self.scale is None:
                raise ValueError(f"{self.id.value} requires precision and scale")
        if self.id in _LIST_LIKE and self.item is None:
            raise ValueError(f"{self.id.value} requires an item field")
        if self.id in (TypeId.FIXED_SIZE_LIST, TypeId.FIXED_SIZE_BINARY) and self.size is None:
            raise ValueError(f"{self.id.value} requires a size")
        if self.id is TypeId.DICTIONARY and (self.key is None or self.value is None):
            raise ValueError("Dictionary requires key and value types")

    def is_nested(self) -> bool:
        """Whether values of this type contain other values."""
        if self.id is TypeId.DICTIONARY:
            return self.value is not None and self.value.is_nested()
        if self.id is TypeId.RUN_END_ENCODED:
            return self.item is not None and self.item.data_type.is_nested()
        return self.id in _ALWAYS_NESTED

    def __str__(self) -> str:
        name = self.id.value
        if self.id in (TypeId.TIME32, TypeId.TIME64, TypeId.DURATION, TypeId.INTERVAL):
            return f"{name}({self.unit.value})"
        if self.id is TypeId.TIMESTAMP:
            tz = f'Some("{self.timezone}")' if self.timezone is not None else "None"
            return f"{name}({self.unit.value}, {tz})"
        if self.id in (TypeId.DECIMAL128, TypeId.DECIMAL256):
            return f"{name}({self.precision}, {self.scale})"
        if self.id is TypeId.FIXED_SIZE_BINARY:
            return f"{name}({self.size})"
        if self.id is TypeId.FIXED_SIZE_LIST:
            return f"{name}({self.item}, {self.size})"
        if self.id in _LIST_LIKE or self.id is TypeId.RUN_END_ENCODED:
            return f"{name}({self.item})"
        if self.id in (TypeId.STRUCT, TypeId.UNION, TypeId.MAP):
            return f"{name}([{', '.join(str(f) for f in self.fields)}])"
        if self.id is TypeId.DICTIONARY:
            return f"{name}({self.key}, {self.value})"
        return name


@dataclass(frozen=True)
class Field:
    """A named, possibly nullable, column of a given data type."""

    name: str
    data_type: DataType
    nullable: bool = True

    def __str__(self) -> str:
        suffix = "" if self.nullable else " not null"
        return f"{self.name}: {self.data_type}{suffix}"


@dataclass(frozen=True)
class Schema:
    """An ordered collection of fields."""

    fields: Tuple[Field, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))

    def __iter__(self) -> Iterator[Field]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __getitem__(self, index: int) -> Field:
        return self.fields[index]

    @property
    def names(self) -> list:
        return [f.name for f in self.fields]

    def field_with_name(self, name: str) -> Field:
        """Return the first field called ``name``; raise KeyError if there is none."""
        for candidate in self.fields:
            if candidate.name == name:
                return candidate
        raise KeyError(f"Unable to get field named \"{name}\". Valid fields: {self.names}")


@dataclass(frozen=True)
class RecordBatch:
    """Equal-length columns of Python values (``None`` for null) under a schema."""

    schema: Schema
    columns: Tuple[Tuple[Any, ...], ...] = ()
    row_count: Optional[int] = field(default=None)

    def __post_init__(self) -> None:
        schema = self.schema if isinstance(self.schema, Schema) else Schema(tuple(self.schema))
        object.__setattr__(self, "schema", schema)
        columns = tuple(tuple(column) for column in self.columns)
        object.__setattr__(self, "columns", columns)

        if len(columns) != len(schema):
            raise ValueError(
                f"number of columns({len(columns)}) must match number of fields({len(schema)}) in schema"
            )
        if self.row_count is None:
            if not columns:
                raise ValueError("must either specify a row count or at least one column")
            object.__setattr__(self, "row_count", len(columns[0]))
        elif self.row_count < 0:
            raise ValueError("row count must not be negative")

        for schema_field, column in zip(schema, columns):
            if len(column) != self.row_count:
                raise ValueError("all columns in a record batch must have the same length")
            if not schema_field.nullable and any(value is None for value in column):
                raise ValueError(
                    f"Column '{schema_field.name}' is declared as non-nullable but contains null values"
                )

    @classmethod
    def from_columns(
        cls,
        schema: Schema | Iterable[Field],
        columns: Sequence[Iterable[Any]],
        row_count: Optional[int] = None,
    ) -> "RecordBatch":
        """Build a batch from any iterables of values."""
        if not isinstance(schema, Schema):
            schema = Schema(tuple(schema))
        return cls(schema, tuple(tuple(c) for c in columns), row_count)

    def num_rows(self) -> int:
        return self.row_count

    def num_columns(self) -> int:
        return len(self.columns)

    def column(self, index: int) -> Tuple[Any, ...]:
        """Return the values of the column at ``index``."""
        if not 0 <= index < len(self.columns):
            raise IndexError(f"column index {index} out of range")
        return self.columns[index]

    def rows(self) -> Iterator[Tuple[Any, ...]]:
        """Iterate over the rows as tuples."""
        if not self.columns:
            return iter(() for _ in range(self.row_count))
        return iter(zip(*self.columns))