"""History dialect: keeps every version of every row in a history table.

``HistoryDialect`` wraps the dialect of a connection. After each successful
create, update or destroy it writes to ``<table><suffix>``, where every row is
one version of an entity, valid from ``created_at`` (inclusive) to
``deleted_at`` (exclusive, NULL while current):

- create inserts an open version copied from the row just written;
- update closes the open version and inserts a new one;
- destroy closes the open version.

The close and the insert of one operation share one timestamp, so versions
never overlap nor leave gaps.

The base statement and the history statements are independent: nothing here
opens a transaction around them. A failure in between leaves the base table
and its history out of step; run them inside ``connection.transaction()``
when that matters. A destroyed entity has no open version, which reads the
same as an entity that did not exist yet.
"""

from __future__ import annotations

import datetime
import logging
from typing import TYPE_CHECKING, Any, Callable, Sequence

from pydantic import Field

from ..clauses import ALIAS_TOKEN, Clause
from ..columns import Columns
from ..errors import HistoryWriteError
from ..schema import HistoryTranslator
from .base import Dialect, Executor

if TYPE_CHECKING:
    from ..model import Model
    from ..query import Query

logger = logging.getLogger(__name__)

DEFAULT_SUFFIX = "_history"

TEMPORAL_PREDICATE = (
    f"{ALIAS_TOKEN}.created_at <= ? AND "
    f"({ALIAS_TOKEN}.deleted_at IS NULL OR {ALIAS_TOKEN}.deleted_at > ?)"
)
"""Selects the version of a row that was current at the bound instant."""


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def to_utc(instant: datetime.datetime) -> datetime.datetime:
    """Return ``instant`` as an aware UTC datetime; naive values are taken as UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=datetime.timezone.utc)
    return instant.astimezone(datetime.timezone.utc)


class HistoryDialect(Dialect):
    """Decorates a dialect so that mutations also maintain history tables."""

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    dialect: Dialect
    """The wrapped dialect; every operation not listed below is forwarded to it."""
    suffix: str = DEFAULT_SUFFIX
    """Appended to a table name to get its history table name."""
    clock: Callable[[], datetime.datetime] = Field(default=utcnow, exclude=True)
    """Returns the current instant; called once per create/update/destroy."""

    # forwarded operations

    @property
    def name(self) -> str:
        return self.dialect.name

    def connect(self, url: str) -> Any:
        return self.dialect.connect(url)

    def quote(self, name: str) -> str:
        return self.dialect.quote(name)

    def translate_sql(self, sql: str) -> str:
        return self.dialect.translate_sql(sql)

    def adapt_value(self, value: Any) -> Any:
        return self.dialect.adapt_value(value)

    def execute_script(self, connection: Any, sql: str) -> None:
        self.dialect.execute_script(connection, sql)

    def insert_returning_id(self, executor: Executor, sql: str, values: Sequence[Any], id_field: str) -> Any:
        return self.dialect.insert_returning_id(executor, sql, values, id_field)

    # intercepted operations

    def schema_translator(self) -> HistoryTranslator:
        return HistoryTranslator(translator=self.dialect.schema_translator(), suffix=self.suffix)

    def history_table_name(self, table_name: str) -> str:
        return table_name + self.suffix

    def create(self, executor: Executor, model: "Model", columns: Columns) -> None:
        self.dialect.create(executor, model, columns)
        timestamp = to_utc(self.clock())
        self._write("historical insert", self._insert_history, executor, model, timestamp)

    def update(self, executor: Executor, model: "Model", columns: Columns) -> None:
        self.dialect.update(executor, model, columns)
        timestamp = to_utc(self.clock())
        self._write("historical delete", self._close_history, executor, model, timestamp)
        self._write("historical insert", self._insert_history, executor, model, timestamp)

    def destroy(self, executor: Executor, model: "Model") -> None:
        self.dialect.destroy(executor, model)
        timestamp = to_utc(self.clock())
        self._write("historical delete", self._close_history, executor, model, timestamp)

    def query_history(self, query: "Query", instant: datetime.datetime) -> "Query":
        """Point ``query`` at the history tables, as they were at ``instant``.

        The temporal predicate filters the queried table and is registered as
        a global clause, so every joined table is filtered the same way.
        """
        instant = to_utc(instant)
        clause = Clause(fragment=TEMPORAL_PREDICATE, arguments=(instant, instant))
        return query.clone_query_with(
            where_clauses=query.where_clauses + [clause],
            global_clauses=query.global_clauses + [clause],
            table_pattern="{}" + self.suffix,
        )

    # history statements

    def _write(self, stage: str, statement: Callable[..., None], executor: Executor,
               model: "Model", timestamp: datetime.datetime) -> None:
        try:
            statement(executor, model, timestamp)
        except Exception as error:  # pylint: disable=broad-except
            logger.error("%s failed for %s %r: %s",
                         stage, model._get_table_name(), model.get_id(), error)
            raise HistoryWriteError(stage, error) from error

    def _insert_history(self, executor: Executor, model: "Model", timestamp: datetime.datetime) -> None:
        table_name = model._get_table_name()
        columns = Columns.for_model(type(model), table_name).persisted()
        created_at, deleted_at = self.quote("created_at"), self.quote("deleted_at")
        sql = self.translate_sql(
            f"INSERT INTO {self.quote(self.history_table_name(table_name))} "
            f"({columns.quoted_string(self)}, {created_at}, {deleted_at})\n"
            f"SELECT {columns.select_string(self)}, ? AS {created_at}, NULL AS {deleted_at}\n"
            f"FROM {self.quote(table_name)} WHERE {self.quote(model._get_id_field())} = ?"
        )
        executor.execute(sql, (timestamp, model.get_id()))

    def _close_history(self, executor: Executor, model: "Model", timestamp: datetime.datetime) -> None:
        deleted_at = self.quote("deleted_at")
        sql = self.translate_sql(
            f"UPDATE {self.quote(self.history_table_name(model._get_table_name()))}\n"
            f"SET {deleted_at} = ?\n"
            f"WHERE {self.quote(model._get_id_field())} = ? AND {deleted_at} IS NULL"
        )
        executor.execute(sql, (timestamp, model.get_id()))
