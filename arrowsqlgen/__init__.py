"""SQL DDL and INSERT generation from Arrow-style schemas and record batches, with PostgreSQL type mapping and SQLite row conversion."""

__version__ = "0.1.0"