import pytest

from arrowsqlgen.coltypes import ColumnType, map_data_type_to_column_type, render_column_type, Dialect
from arrowsqlgen.datatypes import DataType, Field, Schema, TypeId
from arrowsqlgen.pgtype_builder import (
    TypeBuilder,
    get_postgres_composite_type_name,
    map_data_type_to_column_type_postgres,
)


EXPECTED_PERSON = (
    "\n"
    "        DO $$ \n"
    "        BEGIN\n"
    "            IF NOT EXISTS (\n"
    "                SELECT 1\n"
    "                FROM pg_type t\n"
    "                WHERE t.typname = 'person'\n"
    "            ) THEN\n"
    "                CREATE TYPE person AS (\"id\" integer, \"name\" text );\n"
    "            END IF;\n"
    "        END $$;\n"
    "        "
)


def test_type_builder():
    schema = Schema(
        (
            Field("id", DataType(TypeId.INT32), False),
            Field("name", DataType(TypeId.UTF8), False),
        )
    )
    sql = TypeBuilder("person", schema.fields).build()
    assert sql == EXPECTED_PERSON


def test_type_builder_is_repeatable():
    builder = TypeBuilder("person", [Field("id", DataType(TypeId.INT32))])
    assert builder.build() == builder.build()
    assert "WHERE t.typname = 'person'" in builder.build()


def test_type_builder_rejects_nested_struct_field():
    inner = DataType(TypeId.STRUCT, fields=(Field("x", DataType(TypeId.INT32)),))
    with pytest.raises(NotImplementedError):
        TypeBuilder("outer", [Field("inner", inner)])


def test_composite_type_name():
    assert get_postgres_composite_type_name("users", "address") == "struct_users_address"


def test_struct_maps_to_custom_composite_type():
    struct = DataType(TypeId.STRUCT, fields=(Field("x", DataType(TypeId.INT32)),))
    column_type = map_data_type_to_column_type_postgres(struct, "users", "address")
    assert column_type == ColumnType.custom("struct_users_address")
    assert render_column_type(column_type, Dialect.POSTGRES) == "struct_users_address"


def test_non_struct_falls_back_to_generic_mapping():
    for type_id in (TypeId.INT32, TypeId.UTF8, TypeId.BOOLEAN, TypeId.BINARY):
        data_type = DataType(type_id)
        assert map_data_type_to_column_type_postgres(
            data_type, "users", "col"
        ) == map_data_type_to_column_type(data_type)