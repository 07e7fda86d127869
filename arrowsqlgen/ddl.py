"""CREATE TABLE and CREATE INDEX statements built from schemas."""

from __future__ import annotations

from typing import Callable, Iterable, List

from arrowsqlgen.coltypes import (
    ColumnType,
    Dialect,
    map_data_type_to_column_type,
    quote_identifier,
    render_column_type,
)
from arrowsqlgen.datatypes import Field, Schema, TypeId
from arrowsqlgen.pgtype_builder import (
    TypeBuilder,
    get_postgres_composite_type_name,
    map_data_type_to_column_type_postgres,
)


class CreateTableBuilder:
    """Builds a ``CREATE TABLE IF NOT EXISTS`` statement for a schema."""

    def __init__(self, schema: Schema | Iterable[Field], table_name: str) -> None:
        self.schema = schema if isinstance(schema, Schema) else Schema(tuple(schema))
        self.table_name = table_name
        self.keys: List[str] = []

    def primary_keys(self, keys: Iterable[str]) -> "CreateTableBuilder":
        """Set the primary key columns, in order."""
        self.keys = [str(key) for key in keys]
        return self

    def build_postgres(self) -> List[str]:
        """Composite type definitions for struct columns, followed by the table."""
        main_table = self._build(
            Dialect.POSTGRES,
            lambda f: map_data_type_to_column_type_postgres(
                f.data_type, self.table_name, f.name
            ),
        )
        statements = [
            TypeBuilder(
                get_postgres_composite_type_name(self.table_name, f.name),
                f.data_type.fields,
            ).build()
            for f in self.schema
            if f.data_type.id is TypeId.STRUCT
        ]
        statements.append(main_table)
        return statements

    def build_sqlite(self) -> str:
        """Render for SQLite; nested types are stored as JSON."""

        def column_type(f: Field) -> ColumnType:
            if f.data_type.is_nested():
                return ColumnType("JsonBinary")
            return map_data_type_to_column_type(f.data_type)

        return self._build(Dialect.SQLITE, column_type)

    def build_mysql(self) -> str:
        """Render for MySQL."""
        return self._build(Dialect.MYSQL, lambda f: map_data_type_to_column_type(f.data_type))

    def _build(self, dialect: Dialect, column_type_of: Callable[[Field], ColumnType]) -> str:
        parts = []
        for f in self.schema:
            definition = (
                f"{quote_identifier(f.name, dialect)} "
                f"{render_column_type(column_type_of(f), dialect)}"
            )
            if not f.nullable:
                definition += " NOT NULL"
            parts.append(definition)
        if self.keys:
            keys = ", ".join(quote_identifier(key, dialect) for key in self.keys)
            parts.append(f"PRIMARY KEY ({keys})")
        table = quote_identifier(self.table_name, dialect)
        return f"CREATE TABLE IF NOT EXISTS {table} ( {', '.join(parts)} )"


class IndexBuilder:
    """Builds a ``CREATE [UNIQUE] INDEX IF NOT EXISTS`` statement."""

    def __init__(self, table_name: str, columns: Iterable[str]) -> None:
        self.table_name = table_name
        self.columns = [str(column) for column in columns]
        self.is_unique = False

    def unique(self) -> "IndexBuilder":
        """Make the index unique."""
        self.is_unique = True
        return self

    def index_name(self) -> str:
        """The generated index name: ``i_<table>_<col1>_<col2>...``."""
        return f"i_{self.table_name}_{'_'.join(self.columns)}"

    def build_postgres(self) -> str:
        return self.build(Dialect.POSTGRES)

    def build_sqlite(self) -> str:
        return self.build(Dialect.SQLITE)

    def build_mysql(self) -> str:
        return self.build(Dialect.MYSQL)

    def build(self, dialect: Dialect) -> str:
        """Render the index statement for the given dialect."""
        prefix = "UNIQUE " if self.is_unique else ""
        name = quote_identifier(self.index_name(), dialect)
        table = quote_identifier(self.table_name, dialect)
        columns = ", ".join(quote_identifier(column, dialect) for column in self.columns)
        return f"CREATE {prefix}INDEX IF NOT EXISTS {name} ON {table} ({columns})"