"""SQLite schema translator."""

from typing import Any, ClassVar

from ..errors import SchemaError
from .base import SqlTranslator, _pair, _single_column
from .table import SchemaColumn, SchemaTable


class SqliteTranslator(SqlTranslator):
    """DDL for SQLite (3.35+ for DROP COLUMN)."""

    TYPES: ClassVar[dict[str, str]] = {
        **SqlTranslator.TYPES,
        "string": "TEXT",
        "bool": "BOOLEAN",
        "boolean": "BOOLEAN",
        "timestamp": "DATETIME",
        "datetime": "DATETIME",
        "uuid": "TEXT",
        "json": "TEXT",
    }

    def default_value(self, value: Any) -> str:
        if isinstance(value, bool):
            return "1" if value else "0"
        return super().default_value(value)

    def primary_column_definition(self, column: SchemaColumn) -> str:
        if column.col_type.lower() in ("integer", "int", "bigint"):
            return f"{self.quote(column.name)} INTEGER PRIMARY KEY AUTOINCREMENT"
        return super().primary_column_definition(column)

    def change_column(self, table: SchemaTable) -> str:
        column = _single_column(table, "change_column")
        raise SchemaError(
            f"SQLite cannot change column {table.name}.{column.name} in place; "
            "recreate the table instead"
        )

    def drop_column(self, table: SchemaTable) -> str:
        """Drop a column, rebuilding the table's indexes around it.

        SQLite refuses to drop a column that an index references, so every
        index listed on the description is dropped first and the ones that do
        not reference the column are created again afterwards.
        """
        column = _single_column(table, "drop_column")
        sql = [f"DROP INDEX IF EXISTS {self.quote(index.name)};" for index in table.indexes]
        sql.append(super().drop_column(table))
        sql += [
            self.index_definition(table.name, index)
            for index in table.indexes
            if column.name not in index.columns
        ]
        return "\n".join(sql)

    def rename_index(self, table: SchemaTable) -> str:
        old, new = _pair(table.indexes, "rename_index", "index")
        if not new.columns:
            new = new.model_copy(update={"columns": old.columns, "unique": old.unique})
        return "\n".join([
            f"DROP INDEX IF EXISTS {self.quote(old.name)};",
            self.index_definition(table.name, new),
        ])
