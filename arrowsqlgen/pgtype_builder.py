"""Postgres composite type definitions for struct columns."""

from __future__ import annotations

from typing import Iterable, List, Tuple

from arrowsqlgen.coltypes import (
    ColumnType,
    Dialect,
    map_data_type_to_column_type,
    quote_identifier,
    render_column_type,
)
from arrowsqlgen.datatypes import DataType, Field, TypeId


def get_postgres_composite_type_name(table_name: str, field_name: str) -> str:
    """Name of the composite type backing a struct column."""
    return f"struct_{table_name}_{field_name}"


def map_data_type_to_column_type_postgres(
    data_type: DataType, table_name: str, field_name: str
) -> ColumnType:
    """Map a data type to a Postgres column type; structs use their composite type."""
    if data_type.id is TypeId.STRUCT:
        return ColumnType.custom(get_postgres_composite_type_name(table_name, field_name))
    return map_data_type_to_column_type(data_type)


class TypeBuilder:
    """Builds a guarded ``CREATE TYPE ... AS (...)`` statement."""

    def __init__(self, name: str, fields: Iterable[Field]) -> None:
        self.name = name
        self.columns: List[Tuple[str, ColumnType]] = [
            (f.name, map_data_type_to_column_type(f.data_type)) for f in fields
        ]

    def build(self) -> str:
        """Render the statement, wrapped so it does nothing if the type exists."""
        columns = ", ".join(
            f"{quote_identifier(name, Dialect.POSTGRES)} "
            f"{render_column_type(column_type, Dialect.POSTGRES)}"
            for name, column_type in self.columns
        )
        return (
            "\n"
            "        DO $$ \n"
            "        BEGIN\n"
            "            IF NOT EXISTS (\n"
            "                SELECT 1\n"
            "                FROM pg_type t\n"
            f"                WHERE t.typname = '{self.name}'\n"
            "            ) THEN\n"
            f"                CREATE TYPE {self.name} AS ({columns} );"
            "\n"
            "            END IF;\n"
            "        END $$;\n"
            "        "
        )