# arrowsqlgen

Turn Arrow-style schemas and record batches into SQL for PostgreSQL, SQLite and MySQL.
The package also maps PostgreSQL type names to Arrow-style data types. It has no
runtime dependencies.

## Modules

- `arrowsqlgen.datatypes` describes data. It provides `TypeId`, `TimeUnit`, `IntervalUnit`,
  `DataType`, `Field`, `Schema` and `RecordBatch`. A `RecordBatch` holds columns of plain
  Python values, with `None` for null.
- `arrowsqlgen.coltypes` holds `Dialect` (`POSTGRES`, `SQLITE`, `MYSQL`) and `ColumnType`.
  Its `map_data_type_to_column_type` maps a data type to a column type. It also provides
  `render_column_type`, `quote_identifier` and `quote_string`.
- `arrowsqlgen.ddl` builds `CREATE TABLE IF NOT EXISTS` statements with `CreateTableBuilder`.
  That builder supports primary keys. `build_postgres` also emits composite types for struct
  columns. `build_sqlite` stores nested columns as JSON. The module builds
  `CREATE [UNIQUE] INDEX IF NOT EXISTS` statements with `IndexBuilder`.
- `arrowsqlgen.pgtype_builder` emits guarded PostgreSQL `CREATE TYPE ... AS (...)` statements
  with `TypeBuilder`. It also provides `get_postgres_composite_type_name`.
- `arrowsqlgen.insert` builds multi-row `INSERT` statements with `InsertBuilder`. These take an
  optional `OnConflict` clause: `OnConflict.do_nothing(...)` or `OnConflict.update(...)`.
  Unsupported types raise `InsertError`. The module also provides `parse_fixed_offset` for
  timezone strings such as `+05:30`.
- `arrowsqlgen.schema` maps PostgreSQL type names to data types with
  `pg_data_type_to_arrow_type`, `parse_array_type`, `parse_composite_type` and
  `parse_numeric_type`. It raises `SchemaParseError` on unsupported input.
- `arrowsqlgen.composite` decodes the binary wire format of PostgreSQL composite values.
  It provides `CompositeType.from_sql`, `CompositeType.get` and `CompositeType.raw`, along with
  `composite_type_ranges`, `PgType`, `PgField` and `PgKind`.
- `arrowsqlgen.sqlite` converts rows from a `sqlite3` cursor into a `RecordBatch` with
  `rows_to_arrow`. Column types come from the first row's values.

## Installation

```
pip install .
```

## Example

```python
from arrowsqlgen.datatypes import DataType, Field, RecordBatch, Schema, TypeId
from arrowsqlgen.ddl import CreateTableBuilder, IndexBuilder
from arrowsqlgen.insert import InsertBuilder

schema = Schema((
    Field("id", DataType(TypeId.INT32), False),
    Field("name", DataType(TypeId.UTF8), False),
    Field("age", DataType(TypeId.INT32), True),
))

print(CreateTableBuilder(schema, "users").primary_keys(["id"]).build_sqlite())
print(IndexBuilder("users", ["id", "name"]).unique().build_postgres())

batch = RecordBatch(schema, ((1, 2), ("a", "b"), (10, None)))
print(InsertBuilder("users", [batch]).build_postgres())
```

This prints:

```
CREATE TABLE IF NOT EXISTS "users" ( "id" integer NOT NULL, "name" text NOT NULL, "age" integer, PRIMARY KEY ("id") )
CREATE UNIQUE INDEX IF NOT EXISTS "i_users_id_name" ON "users" ("id", "name")
INSERT INTO "users" ("id", "name", "age") VALUES (1, 'a', 10), (2, 'b', NULL)
```

PostgreSQL type names map to data types:

```python
from arrowsqlgen.schema import pg_data_type_to_arrow_type

str(pg_data_type_to_arrow_type("numeric(10,2)", None))   # 'Decimal128(10, 2)'
```

## What it does not do

The package only produces SQL text and converts values. It does not open database
connections or run statements. For PostgreSQL it does not turn query result rows into record
batches. It can only decode composite values from their raw bytes. SQLite results are the
only query rows it converts.

## Running the tests

```
pip install .[test]
pytest
```