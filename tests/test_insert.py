from datetime import timedelta

import pytest

from arrowsqlgen.coltypes import Dialect
from arrowsqlgen.datatypes import (
    DataType,
    Field,
    IntervalUnit,
    RecordBatch,
    Schema,
    TimeUnit,
    TypeId,
)
from arrowsqlgen.insert import (
    InsertBuilder,
    InsertError,
    OnConflict,
    parse_fixed_offset,
    use_json_insert_for_type,
)

INT32 = DataType(TypeId.INT32)
UTF8 = DataType(TypeId.UTF8)


def _batch(fields, columns):
    return RecordBatch.from_columns(Schema(tuple(fields)), columns)


def _single(data_type, values, name="c"):
    return _batch([Field(name, data_type, True)], [values])


def test_table_insertion():
    ids, names, ages = [1, 2, 3], ["a", "b", "c"], [10, 20, 30]
    batch1 = _batch(
        [Field("id", INT32, False), Field("name", UTF8, False), Field("age", INT32, True)],
        [ids, names, ages],
    )
    batch2 = _batch(
        [Field("id", INT32, False), Field("name", UTF8, False), Field("blah", INT32, True)],
        [ids, names, ages],
    )
    sql = InsertBuilder("users", [batch1, batch2]).build_postgres(None)
    assert sql == (
        'INSERT INTO "users" ("id", "name", "age") VALUES (1, \'a\', 10), (2, \'b\', 20), '
        "(3, 'c', 30), (1, 'a', 10), (2, 'b', 20), (3, 'c', 30)"
    )


def test_table_insertion_with_list():
    list_type = DataType(TypeId.LIST, item=Field("item", INT32, True))
    batch = _single(list_type, [[1, 2, 3], [4, 5, 6], [7, 8, 9]], name="list")
    sql = InsertBuilder("arrays", [batch]).build_postgres(None)
    assert sql == (
        'INSERT INTO "arrays" ("list") VALUES (CAST(ARRAY [1,2,3] AS int4[])), '
        "(CAST(ARRAY [4,5,6] AS int4[])), (CAST(ARRAY [7,8,9] AS int4[]))"
    )


def test_nulls_and_booleans():
    batch = _batch(
        [Field("a", INT32, True), Field("b", DataType(TypeId.BOOLEAN), True)],
        [[None, 1], [True, False]],
    )
    sql = InsertBuilder("t", [batch]).build_postgres()
    assert sql == 'INSERT INTO "t" ("a", "b") VALUES (NULL, TRUE), (1, FALSE)'


def test_floats():
    batch = _single(DataType(TypeId.FLOAT64), [1.5, 2.0])
    assert InsertBuilder("t", [batch]).build_postgres().endswith("VALUES (1.5), (2)")


def test_string_escaping_postgres_and_sqlite():
    batch = _single(UTF8, ["it's"])
    assert InsertBuilder("t", [batch]).build_postgres().endswith("VALUES (E'it\\'s')")
    assert InsertBuilder("t", [batch]).build_sqlite().endswith("VALUES ('it''s')")


def test_mysql_quoting():
    batch = _single(INT32, [7], name="id")
    assert InsertBuilder("t", [batch]).build_mysql() == "INSERT INTO `t` (`id`) VALUES (7)"


def test_decimal():
    batch = _single(DataType(TypeId.DECIMAL128, precision=10, scale=2), [12345, -5])
    assert InsertBuilder("t", [batch]).build_postgres().endswith("VALUES (123.45), (-0.05)")


def test_date32_and_date64():
    batch = _batch(
        [Field("d", DataType(TypeId.DATE32), True), Field("e", DataType(TypeId.DATE64), True)],
        [[19723], [19723 * 86_400_000]],
    )
    sql = InsertBuilder("t", [batch]).build_postgres()
    assert sql.endswith("VALUES ('2024-01-01', '2024-01-01')")


def test_time64_nanosecond():
    value = (10 * 3600 + 30 * 60) * 1_000_000_000
    batch = _single(DataType(TypeId.TIME64, unit=TimeUnit.NANOSECOND), [value])
    assert InsertBuilder("t", [batch]).build_postgres().endswith("VALUES ('10:30:00.0')")


def test_time32_second():
    batch = _single(DataType(TypeId.TIME32, unit=TimeUnit.SECOND), [10 * 3600 + 45 * 60 + 15])
    assert InsertBuilder("t", [batch]).build_postgres().endswith("VALUES ('10:45:15.0')")


def test_timestamp_without_timezone():
    batch = _single(DataType(TypeId.TIMESTAMP, unit=TimeUnit.MILLISECOND), [1500])
    sql = InsertBuilder("t", [batch]).build_postgres()
    assert sql.endswith("VALUES ('1970-01-01 00:00:01.5')")


def test_timestamp_with_timezone():
    data_type = DataType(TypeId.TIMESTAMP, unit=TimeUnit.SECOND, timezone="+05:00")
    batch = _single(data_type, [0])
    sql = InsertBuilder("t", [batch]).build_postgres()
    assert sql.endswith("VALUES ('1970-01-01 05:00:00 +05:00')")


def test_timestamp_with_unparseable_timezone():
    data_type = DataType(TypeId.TIMESTAMP, unit=TimeUnit.SECOND, timezone="UTC")
    batch = _single(data_type, [0])
    with pytest.raises(InsertError, match="timezone"):
        InsertBuilder("t", [batch]).build_postgres()


def test_interval_month_day_nano():
    data_type = DataType(TypeId.INTERVAL, unit=IntervalUnit.MONTH_DAY_NANO)
    batch = _single(data_type, [(1, 2, 3000)])
    sql = InsertBuilder("t", [batch]).build_postgres()
    assert sql.endswith("VALUES ('1 months 2 days 3 microseconds')")


def test_binary_postgres_and_sqlite():
    batch = _single(DataType(TypeId.BINARY), [b"\xab\x01"])
    assert InsertBuilder("t", [batch]).build_postgres().endswith("VALUES ('\\xAB01')")
    assert InsertBuilder("t", [batch]).build_sqlite().endswith("VALUES (x'AB01')")


def test_list_as_json_for_sqlite():
    list_type = DataType(TypeId.LIST, item=Field("item", INT32, True))
    batch = _single(list_type, [[1, 2], None])
    assert InsertBuilder("t", [batch]).build_sqlite().endswith("VALUES ('[1,2]'), (NULL)")


def test_struct_as_row_for_postgres():
    struct_type = DataType(TypeId.STRUCT, fields=(Field("a", INT32), Field("b", UTF8)))
    batch = _single(struct_type, [{"a": 1, "b": "x"}], name="s")
    sql = InsertBuilder("t", [batch]).build_postgres()
    assert sql == "INSERT INTO \"t\" (\"s\") VALUES (ROW(1, 'x'))"


def test_struct_as_json_for_sqlite():
    struct_type = DataType(TypeId.STRUCT, fields=(Field("a", INT32), Field("b", UTF8)))
    batch = _single(struct_type, [{"a": 1, "b": None}], name="s")
    sql = InsertBuilder("t", [batch]).build_sqlite()
    assert sql == 'INSERT INTO "t" ("s") VALUES (\'{"a":1}\n\')'


def test_on_conflict_do_nothing_postgres():
    batch = _single(INT32, [1], name="id")
    sql = InsertBuilder("t", [batch]).build_postgres(OnConflict.do_nothing(["id"]))
    assert sql == 'INSERT INTO "t" ("id") VALUES (1) ON CONFLICT ("id") DO NOTHING'


def test_on_conflict_update_sqlite():
    batch = _batch([Field("id", INT32), Field("name", UTF8)], [[1], ["a"]])
    sql = InsertBuilder("t", [batch]).build_sqlite(OnConflict.update(["id"], ["name"]))
    assert sql.endswith(
        'ON CONFLICT ("id") DO UPDATE SET "name" = "excluded"."name"'
    )


def test_on_conflict_mysql():
    batch = _single(INT32, [1], name="id")
    sql = InsertBuilder("t", [batch]).build_mysql(OnConflict.do_nothing(["id"]))
    assert sql == "INSERT INTO `t` (`id`) VALUES (1) ON DUPLICATE KEY UPDATE `id` = `id`"


def test_unsupported_type_raises():
    batch = _single(DataType(TypeId.FLOAT16), [1.0])
    with pytest.raises(InsertError, match="Unimplemented data type"):
        InsertBuilder("t", [batch]).build_postgres()


def test_mismatched_column_count_raises():
    batch1 = _single(INT32, [1], name="a")
    batch2 = _batch([Field("a", INT32), Field("b", INT32)], [[1], [2]])
    with pytest.raises(InsertError, match="Number of values"):
        InsertBuilder("t", [batch1, batch2]).build_postgres()


def test_no_batches_raises():
    with pytest.raises(ValueError):
        InsertBuilder("t", []).build(Dialect.POSTGRES)


def test_use_json_insert_for_type():
    list_type = DataType(TypeId.LIST, item=Field("item", INT32, True))
    assert use_json_insert_for_type(list_type, Dialect.SQLITE) is True
    assert use_json_insert_for_type(list_type, Dialect.POSTGRES) is False
    assert use_json_insert_for_type(INT32, Dialect.SQLITE) is False


@pytest.mark.parametrize(
    "text, seconds",
    [("+05:30", 19800), ("+0530", 19800), ("-08", -28800), ("-00:00", 0)],
)
def test_parse_fixed_offset_valid(text, seconds):
    offset = parse_fixed_offset(text)
    assert offset.utcoffset(None) == timedelta(seconds=seconds)


@pytest.mark.parametrize("text", ["Z", "UTC", "+5:30", "+99:00", "*05:00", "+05-00"])
def test_parse_fixed_offset_invalid(text):
    assert parse_fixed_offset(text) is None