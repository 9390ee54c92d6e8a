"""Schema translator that mirrors every migration onto history tables.

Wraps another ``SchemaTranslator``. Each operation emits the wrapped
translator's SQL for the base table, followed by the same operation on the
base table's history counterpart (same name plus ``suffix``). History tables
carry the base columns without primary key, unique or foreign key
constraints and without indexes, plus ``created_at`` and ``deleted_at``.
"""

from __future__ import annotations

import logging
from typing import Callable

from ..errors import SchemaError
from .base import SchemaTranslator
from .table import SchemaTable

logger = logging.getLogger(__name__)

HISTORICAL_TABLE_ERROR = "operation already applies to historical tables"


class HistoryTranslator(SchemaTranslator):
    """Decorates a schema translator so that history tables follow the base ones."""

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    translator: SchemaTranslator
    """The translator for the underlying engine."""
    suffix: str = "_history"
    """Appended to a base table name to get its history table name."""

    def _guard(self, *names: str) -> None:
        for name in names:
            if name.endswith(self.suffix):
                raise SchemaError(HISTORICAL_TABLE_ERROR)

    def shadow_table(self, table: SchemaTable) -> SchemaTable:
        """Derive the history table description from a base table description."""
        shadow = self._mirror(table)
        shadow.disable_timestamps()
        try:
            shadow.column("created_at", "timestamp", {})
            shadow.column("deleted_at", "timestamp", {"null": True})
        except SchemaError as error:
            raise SchemaError(f"historical table: {error}") from error
        return shadow

    def _apply(self, operation: Callable[[SchemaTable], str], table: SchemaTable) -> str:
        self._guard(table.name)
        sql = operation(table)
        return sql + "\n" + operation(self._mirror(table))

    def _mirror(self, table: SchemaTable) -> SchemaTable:
        """Copy of an operation's description aimed at the history table: no keys, no indexes."""
        shadow = table.model_copy(deep=True)
        shadow.name = table.name + self.suffix
        shadow.foreign_keys = []
        shadow.indexes = []
        for column in shadow.columns:
            column.primary = False
            column.options.pop("unique", None)
        return shadow

    def create_table(self, table: SchemaTable) -> str:
        self._guard(table.name)
        base = table.model_copy(deep=True).disable_timestamps()
        sql = self.translator.create_table(base)
        shadow = self.shadow_table(base)
        logger.info("CREATE TABLE %s with history table %s", table.name, shadow.name)
        return sql + "\n" + self.translator.create_table(shadow)

    def drop_table(self, table: SchemaTable) -> str:
        return self._apply(self.translator.drop_table, table)

    def rename_table(self, tables: list[SchemaTable]) -> str:
        self._guard(*(t.name for t in tables[:2]))
        sql = self.translator.rename_table(tables)
        shadows = [t.model_copy(update={"name": t.name + self.suffix}) for t in tables]
        return sql + "\n" + self.translator.rename_table(shadows)

    def add_column(self, table: SchemaTable) -> str:
        return self._apply(self.translator.add_column, table)

    def change_column(self, table: SchemaTable) -> str:
        return self._apply(self.translator.change_column, table)

    def drop_column(self, table: SchemaTable) -> str:
        return self._apply(self.translator.drop_column, table)

    def rename_column(self, table: SchemaTable) -> str:
        return self._apply(self.translator.rename_column, table)

    # index operations only ever concern the base table

    def add_index(self, table: SchemaTable) -> str:
        return self.translator.add_index(table)

    def drop_index(self, table: SchemaTable) -> str:
        return self.translator.drop_index(table)

    def rename_index(self, table: SchemaTable) -> str:
        return self.translator.rename_index(table)
