import pytest

from arrowsqlgen.datatypes import (
    DataType,
    Field,
    IntervalUnit,
    RecordBatch,
    Schema,
    TimeUnit,
    TypeId,
)

INT32 = DataType(TypeId.INT32)
UTF8 = DataType(TypeId.UTF8)


def _list_of(dt):
    return DataType(TypeId.LIST, item=Field("item", dt, True))


def test_data_type_equality_and_hash():
    a = DataType(TypeId.DECIMAL128, precision=10, scale=2)
    b = DataType(TypeId.DECIMAL128, precision=10, scale=2)
    c = DataType(TypeId.DECIMAL128, precision=38, scale=20)
    assert a == b
    assert hash(a) == hash(b)
    assert a != c
    assert _list_of(INT32) == _list_of(DataType(TypeId.INT32))


@pytest.mark.parametrize(
    "dt",
    [
        _list_of(INT32),
        DataType(TypeId.LARGE_LIST, item=Field("item", UTF8)),
        DataType(TypeId.FIXED_SIZE_LIST, item=Field("item", DataType(TypeId.FLOAT64)), size=2),
        DataType(TypeId.STRUCT, fields=[Field("x", INT32)]),
        DataType(TypeId.MAP, fields=[Field("entries", INT32)]),
        DataType(TypeId.DICTIONARY, key=DataType(TypeId.INT8), value=_list_of(INT32)),
    ],
)
def test_is_nested_true(dt):
    assert dt.is_nested() is True


@pytest.mark.parametrize(
    "dt",
    [
        INT32,
        UTF8,
        DataType(TypeId.BINARY),
        DataType(TypeId.TIMESTAMP, unit=TimeUnit.NANOSECOND, timezone="UTC"),
        DataType(TypeId.INTERVAL, unit=IntervalUnit.MONTH_DAY_NANO),
        DataType(TypeId.DICTIONARY, key=DataType(TypeId.INT8), value=UTF8),
    ],
)
def test_is_nested_false(dt):
    assert dt.is_nested() is False


def test_missing_parameters_raise():
    with pytest.raises(ValueError):
        DataType(TypeId.TIMESTAMP)
    with pytest.raises(ValueError):
        DataType(TypeId.DECIMAL128, precision=10)
    with pytest.raises(ValueError):
        DataType(TypeId.LIST)
    with pytest.raises(ValueError):
        DataType(TypeId.INTERVAL, unit=TimeUnit.SECOND)


def test_simple_type_str_is_type_name():
    assert str(INT32) == TypeId.INT32.value
    assert str(DataType(TypeId.LARGE_UTF8)) == TypeId.LARGE_UTF8.value


def test_decimal_str_contains_parameters():
    text = str(DataType(TypeId.DECIMAL128, precision=38, scale=20))
    assert text.startswith(TypeId.DECIMAL128.value)
    assert "38" in text and "20" in text


def test_schema_field_with_name():
    schema = Schema([Field("id", INT32, False), Field("name", UTF8)])
    assert schema.field_with_name("name") == Field("name", UTF8, True)
    assert len(schema) == 2
    assert schema.names == ["id", "name"]
    with pytest.raises(KeyError):
        schema.field_with_name("missing")


def test_record_batch_dimensions():
    schema = Schema([Field("id", INT32, False), Field("name", UTF8, False), Field("age", INT32)])
    batch = RecordBatch(schema, ([1, 2, 3], ["a", "b", "c"], [10, None, 30]))
    assert batch.num_rows() == 3
    assert batch.num_columns() == 3
    assert batch.column(1) == ("a", "b", "c")
    assert list(batch.rows()) == [(1, "a", 10), (2, "b", None), (3, "c", 30)]


def test_record_batch_column_out_of_range():
    batch = RecordBatch(Schema([Field("id", INT32)]), ([1],))
    with pytest.raises(IndexError):
        batch.column(1)


def test_record_batch_mismatched_lengths():
    schema = Schema([Field("a", INT32), Field("b", INT32)])
    with pytest.raises(ValueError):
        RecordBatch(schema, ([1, 2], [1]))


def test_record_batch_column_count_must_match_schema():
    with pytest.raises(ValueError):
        RecordBatch(Schema([Field("a", INT32)]), ([1], [2]))


def test_record_batch_non_nullable_with_null():
    with pytest.raises(ValueError, match="non-nullable"):
        RecordBatch(Schema([Field("a", INT32, False)]), ([1, None],))


def test_record_batch_without_columns_needs_row_count():
    with pytest.raises(ValueError):
        RecordBatch(Schema([]), ())
    batch = RecordBatch(Schema([]), (), row_count=4)
    assert batch.num_rows() == 4
    assert batch.num_columns() == 0
    assert len(list(batch.rows())) == 4


def test_from_columns_accepts_iterables():
    batch = RecordBatch.from_columns([Field("x", INT32)], [iter([5, 6])])
    assert batch.schema == Schema([Field("x", INT32)])
    assert batch.column(0) == (5, 6)