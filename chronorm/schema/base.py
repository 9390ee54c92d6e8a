"""Schema translators: turn table descriptions into DDL.

``SchemaTranslator`` is the abstract contract (one method per migration
verb). ``SqlTranslator`` implements it with standard SQL; engine translators
subclass it and override types, quoting and the statements their engine
spells differently.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from pydantic import BaseModel

from ..errors import SchemaError
from .table import Index, SchemaColumn, SchemaTable

logger = logging.getLogger(__name__)


class SchemaTranslator(BaseModel, ABC):
    """Translate migration operations on a SchemaTable into SQL scripts."""

    model_config = {"arbitrary_types_allowed": True}

    @abstractmethod
    def create_table(self, table: SchemaTable) -> str: ...

    @abstractmethod
    def drop_table(self, table: SchemaTable) -> str: ...

    @abstractmethod
    def rename_table(self, tables: list[SchemaTable]) -> str:
        """Rename ``tables[0]`` to ``tables[1]``."""

    @abstractmethod
    def add_column(self, table: SchemaTable) -> str: ...

    @abstractmethod
    def change_column(self, table: SchemaTable) -> str: ...

    @abstractmethod
    def drop_column(self, table: SchemaTable) -> str: ...

    @abstractmethod
    def rename_column(self, table: SchemaTable) -> str:
        """Rename ``table.columns[0]`` to ``table.columns[1]``."""

    @abstractmethod
    def add_index(self, table: SchemaTable) -> str: ...

    @abstractmethod
    def drop_index(self, table: SchemaTable) -> str: ...

    @abstractmethod
    def rename_index(self, table: SchemaTable) -> str:
        """Rename ``table.indexes[0]`` to ``table.indexes[1]``."""


def _single_column(table: SchemaTable, operation: str) -> SchemaColumn:
    if not table.columns:
        raise SchemaError(f"{operation} on table {table.name} requires a column")
    return table.columns[0]


def _single_index(table: SchemaTable, operation: str) -> Index:
    if not table.indexes:
        raise SchemaError(f"{operation} on table {table.name} requires an index")
    return table.indexes[0]


def _pair(items: list, operation: str, what: str) -> tuple:
    if len(items) < 2:
        raise SchemaError(f"{operation} requires an old and a new {what}")
    return items[0], items[1]


class SqlTranslator(SchemaTranslator):
    """Standard-SQL translator; the base for engine-specific translators."""

    QUOTE_CHAR: ClassVar[str] = '"'
    TYPES: ClassVar[dict[str, str]] = {
        "string": "VARCHAR",
        "text": "TEXT",
        "integer": "INTEGER",
        "int": "INTEGER",
        "bigint": "BIGINT",
        "bool": "BOOLEAN",
        "boolean": "BOOLEAN",
        "float": "REAL",
        "decimal": "DECIMAL",
        "timestamp": "TIMESTAMP",
        "datetime": "TIMESTAMP",
        "date": "DATE",
        "time": "TIME",
        "uuid": "UUID",
        "json": "JSON",
        "blob": "BLOB",
    }
    DEFAULT_STRING_SIZE: ClassVar[int] = 255

    def quote(self, name: str) -> str:
        q = self.QUOTE_CHAR
        return q + name.replace(q, q + q) + q

    # column rendering

    def column_type(self, column: SchemaColumn) -> str:
        key = column.col_type.lower()
        sql_type = self.TYPES.get(key, column.col_type.upper())
        if key == "string" and sql_type == "VARCHAR":
            return f"VARCHAR({column.options.get('size', self.DEFAULT_STRING_SIZE)})"
        if "size" in column.options and key != "string":
            return f"{sql_type}({column.options['size']})"
        return sql_type

    def default_value(self, value: Any) -> str:
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return "TRUE" if value else "FALSE"
        if isinstance(value, (int, float)):
            return str(value)
        return "'" + str(value).replace("'", "''") + "'"

    def primary_column_definition(self, column: SchemaColumn) -> str:
        return f"{self.quote(column.name)} {self.column_type(column)} PRIMARY KEY"

    def column_definition(self, column: SchemaColumn, primary: bool = True) -> str:
        """Render one column; ``primary=False`` renders a primary column as a plain one."""
        if column.primary and primary:
            return self.primary_column_definition(column)
        sql = f"{self.quote(column.name)} {self.column_type(column)}"
        if not column.nullable:
            sql += " NOT NULL"
        if "default_raw" in column.options:
            sql += f" DEFAULT {column.options['default_raw']}"
        elif "default" in column.options:
            sql += f" DEFAULT {self.default_value(column.options['default'])}"
        return sql

    def index_definition(self, table_name: str, index: Index) -> str:
        unique = "UNIQUE " if index.unique else ""
        columns = ", ".join(self.quote(c) for c in index.columns)
        return f"CREATE {unique}INDEX {self.quote(index.name)} ON {self.quote(table_name)} ({columns});"

    def foreign_key_definition(self, table: SchemaTable, fk) -> str:
        sql = (
            f"FOREIGN KEY ({self.quote(fk.column)}) REFERENCES "
            f"{self.quote(fk.references.table)} ({', '.join(self.quote(c) for c in fk.references.columns)})"
        )
        if "on_delete" in fk.options:
            sql += f" ON DELETE {fk.options['on_delete']}"
        if "on_update" in fk.options:
            sql += f" ON UPDATE {fk.options['on_update']}"
        return sql

    def _timestamp_columns(self, table: SchemaTable) -> list[SchemaColumn]:
        if not table.timestamps_enabled:
            return []
        return [
            SchemaColumn(name=name, col_type="timestamp", options={"default_raw": "CURRENT_TIMESTAMP"})
            for name in ("created_at", "updated_at")
            if not table.has_column(name)
        ]

    # operations

    def create_table(self, table: SchemaTable) -> str:
        columns = list(table.columns) + self._timestamp_columns(table)
        if not columns:
            raise SchemaError(f"cannot create table {table.name} without columns")
        composite = len(table.primary_keys) > 1
        statements = [self.column_definition(c, primary=not composite) for c in columns]
        if composite:
            statements.append(f"PRIMARY KEY ({', '.join(self.quote(n) for n in table.primary_keys)})")
        statements += [self.foreign_key_definition(table, fk) for fk in table.foreign_keys]
        body = ",\n".join(statements)
        sql = [f"CREATE TABLE {self.quote(table.name)} (\n{body}\n);"]
        sql += [self.index_definition(table.name, index) for index in table.indexes]
        logger.debug("CREATE TABLE %s with %d column(s)", table.name, len(columns))
        return "\n".join(sql)

    def drop_table(self, table: SchemaTable) -> str:
        return f"DROP TABLE {self.quote(table.name)};"

    def rename_table(self, tables: list[SchemaTable]) -> str:
        old, new = _pair(tables, "rename_table", "table")
        return f"ALTER TABLE {self.quote(old.name)} RENAME TO {self.quote(new.name)};"

    def add_column(self, table: SchemaTable) -> str:
        column = _single_column(table, "add_column")
        return f"ALTER TABLE {self.quote(table.name)} ADD COLUMN {self.column_definition(column)};"

    def change_column(self, table: SchemaTable) -> str:
        column = _single_column(table, "change_column")
        name = self.quote(column.name)
        changes = [f"ALTER COLUMN {name} TYPE {self.column_type(column)}"]
        changes.append(f"ALTER COLUMN {name} {'DROP' if column.nullable else 'SET'} NOT NULL")
        if "default_raw" in column.options:
            changes.append(f"ALTER COLUMN {name} SET DEFAULT {column.options['default_raw']}")
        elif "default" in column.options:
            changes.append(f"ALTER COLUMN {name} SET DEFAULT {self.default_value(column.options['default'])}")
        return f"ALTER TABLE {self.quote(table.name)} {', '.join(changes)};"

    def drop_column(self, table: SchemaTable) -> str:
        column = _single_column(table, "drop_column")
        return f"ALTER TABLE {self.quote(table.name)} DROP COLUMN {self.quote(column.name)};"

    def rename_column(self, table: SchemaTable) -> str:
        old, new = _pair(table.columns, "rename_column", "column")
        return (
            f"ALTER TABLE {self.quote(table.name)} "
            f"RENAME COLUMN {self.quote(old.name)} TO {self.quote(new.name)};"
        )

    def add_index(self, table: SchemaTable) -> str:
        return self.index_definition(table.name, _single_index(table, "add_index"))

    def drop_index(self, table: SchemaTable) -> str:
        index = _single_index(table, "drop_index")
        return f"DROP INDEX {self.quote(index.name)};"

    def rename_index(self, table: SchemaTable) -> str:
        old, new = _pair(table.indexes, "rename_index", "index")
        return f"ALTER INDEX {self.quote(old.name)} RENAME TO {self.quote(new.name)};"
