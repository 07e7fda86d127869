[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "arrowsqlgen"
version = "0.1.0"
description = "Generate SQL DDL and INSERT statements from Arrow-style schemas and record batches for PostgreSQL, SQLite and MySQL"
requires-python = ">=3.10"
dependencies = []
keywords = ["sql", "arrow", "postgres", "sqlite", "mysql", "ddl", "schema"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
    "Topic :: Software Development :: Code Generators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["arrowsqlgen"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
