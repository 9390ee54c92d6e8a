"""Base Dialect type: per-engine connection, quoting, placeholders and CRUD."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, Sequence

from pydantic import BaseModel

if TYPE_CHECKING:
    from ..columns import Columns
    from ..model import Model
    from ..schema import SchemaTranslator

logger = logging.getLogger(__name__)


class Executor(Protocol):
    """What dialect operations run their statements on (a Connection or a Transaction)."""

    def execute(self, sql: str, parameters: Sequence[Any] = ()) -> int:
        """Run a statement and return the affected row count."""

    def fetch(self, sql: str, parameters: Sequence[Any] = (), rows_as_dicts: bool = False) -> list:
        """Run a statement and return its rows."""


class Dialect(BaseModel, ABC):
    """Base for database dialects; subclasses implement connect() and schema_translator()."""

    model_config = {"arbitrary_types_allowed": True}

    SUPPORTED_SCHEMA: ClassVar[tuple[str, ...]] = ()
    """URL schemes this dialect handles (e.g. ('sqlite',), ('postgresql', 'postgres'))."""

    QUOTE_CHAR: ClassVar[str] = '"'
    PLACEHOLDER: ClassVar[str] = "?"
    """Parameter marker of the driver; SQL is written with ``?`` and translated to this."""

    @property
    def name(self) -> str:
        return self.SUPPORTED_SCHEMA[0]

    @abstractmethod
    def connect(self, url: str) -> Any:
        """Return a new raw driver connection for the given URL.

        The return value is engine-specific (e.g. sqlite3.Connection, pymysql.Connection).
        """
        ...  # pylint: disable=unnecessary-ellipsis

    @abstractmethod
    def schema_translator(self) -> "SchemaTranslator":
        """Return the translator turning table descriptions into this engine's DDL."""

    def quote(self, name: str) -> str:
        """Quote an identifier; dotted names are quoted part by part."""
        q = self.QUOTE_CHAR
        return ".".join(q + part.replace(q, q + q) + q for part in name.split("."))

    def translate_sql(self, sql: str) -> str:
        """Replace ``?`` placeholders outside string literals with the driver's marker."""
        if self.PLACEHOLDER == "?":
            return sql
        result = []
        in_string = False
        for char in sql:
            if char == "'":
                in_string = not in_string
                result.append(char)
            elif char == "%":
                result.append("%%")
            elif char == "?" and not in_string:
                result.append(self.PLACEHOLDER)
            else:
                result.append(char)
        return "".join(result)

    def adapt_value(self, value: Any) -> Any:
        """Convert a Python value into something the driver can bind."""
        return value

    def execute_script(self, connection: Any, sql: str) -> None:
        """Run a multi-statement script (e.g. DDL from a schema translator)."""
        cursor = connection.cursor()
        try:
            cursor.execute(sql)
        finally:
            cursor.close()

    def insert_returning_id(self, executor: Executor, sql: str, values: Sequence[Any], id_field: str) -> Any:
        """Run an INSERT and return the generated primary key."""
        rows = executor.fetch(self.translate_sql(f"{sql}\nRETURNING {self.quote(id_field)}"), values)
        return rows[0][0]

    def create(self, executor: Executor, model: "Model", columns: "Columns") -> None:
        """Insert ``model`` as a new row; sets its id when the database generates it."""
        table = self.quote(model._get_table_name())
        id_field = model._get_id_field()
        writeable = columns.writeable()
        if model.get_id() is not None:
            writeable.add(id_field)
        values = model.column_values(writeable.names)
        if len(writeable):
            sql = (
                f"INSERT INTO {table} ({writeable.quoted_string(self)})\n"
                f"VALUES ({writeable.symbolized_string()})"
            )
        else:
            sql = f"INSERT INTO {table} DEFAULT VALUES"
        logger.debug("create %s: %s", model._get_table_name(), sql)
        if model.get_id() is None:
            model.set_id(self.insert_returning_id(executor, sql, values, id_field))
        else:
            executor.execute(self.translate_sql(sql), values)

    def update(self, executor: Executor, model: "Model", columns: "Columns") -> None:
        """Write the writeable columns of ``model`` to its row."""
        writeable = columns.writeable()
        if not len(writeable):
            logger.debug("update %s: no writeable column", model._get_table_name())
            return
        sql = (
            f"UPDATE {self.quote(model._get_table_name())}\n"
            f"SET {writeable.update_string(self)}\n"
            f"WHERE {self.quote(model._get_id_field())} = ?"
        )
        values = model.column_values(writeable.names) + [model.get_id()]
        executor.execute(self.translate_sql(sql), values)

    def destroy(self, executor: Executor, model: "Model") -> None:
        """Delete the row of ``model``."""
        sql = (
            f"DELETE FROM {self.quote(model._get_table_name())}\n"
            f"WHERE {self.quote(model._get_id_field())} = ?"
        )
        executor.execute(self.translate_sql(sql), (model.get_id(),))
