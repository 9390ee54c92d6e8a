"""PostgreSQL schema translator."""

from typing import ClassVar

from .base import SqlTranslator
from .table import SchemaColumn


class PostgresTranslator(SqlTranslator):
    """DDL for PostgreSQL."""

    TYPES: ClassVar[dict[str, str]] = {
        **SqlTranslator.TYPES,
        "float": "DOUBLE PRECISION",
        "json": "JSONB",
        "blob": "BYTEA",
    }

    def primary_column_definition(self, column: SchemaColumn) -> str:
        serial = {"integer": "SERIAL", "int": "SERIAL", "bigint": "BIGSERIAL"}.get(column.col_type.lower())
        if serial:
            return f"{self.quote(column.name)} {serial} PRIMARY KEY"
        return super().primary_column_definition(column)
