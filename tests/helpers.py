"""Shared helpers for schemagate tests."""

from schemagate.lib.table_schema import TableSchema


def create_schema(table: str, *families: str) -> TableSchema:
    """Shorthand for ``TableSchema.of``."""
    return TableSchema.of(table, *families)


def copy_schemas(schemas):
    """Independent copies of ``schemas``."""
    return [schema.copy() for schema in schemas]
