"""MySQL schema translator."""

from typing import ClassVar

from .base import SqlTranslator, _pair, _single_column, _single_index
from .table import SchemaColumn, SchemaTable


class MysqlTranslator(SqlTranslator):
    """DDL for MySQL 8."""

    QUOTE_CHAR: ClassVar[str] = "`"
    TYPES: ClassVar[dict[str, str]] = {
        **SqlTranslator.TYPES,
        "bool": "TINYINT(1)",
        "boolean": "TINYINT(1)",
        "float": "DOUBLE",
        "timestamp": "DATETIME(6)",
        "datetime": "DATETIME(6)",
        "uuid": "CHAR(36)",
    }

    def primary_column_definition(self, column: SchemaColumn) -> str:
        if column.col_type.lower() in ("integer", "int", "bigint"):
            return f"{self.quote(column.name)} {self.column_type(column)} NOT NULL AUTO_INCREMENT PRIMARY KEY"
        return super().primary_column_definition(column)

    def change_column(self, table: SchemaTable) -> str:
        column = _single_column(table, "change_column")
        return f"ALTER TABLE {self.quote(table.name)} MODIFY {self.column_definition(column)};"

    def drop_index(self, table: SchemaTable) -> str:
        index = _single_index(table, "drop_index")
        return f"DROP INDEX {self.quote(index.name)} ON {self.quote(table.name)};"

    def rename_index(self, table: SchemaTable) -> str:
        old, new = _pair(table.indexes, "rename_index", "index")
        return f"ALTER TABLE {self.quote(table.name)} RENAME INDEX {self.quote(old.name)} TO {self.quote(new.name)};"
