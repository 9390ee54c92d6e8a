"""Connections: configuration, statement execution and entity persistence.

``connect(url, name="default")`` builds a Connection and registers it under
``name``; ``get_connection(name)`` returns it. The URL query string carries
the mode and its options::

    connect("sqlite:////tmp/app.sqlite3?mode=history&suffix=_versions")
"""

from __future__ import annotations

import logging
import urllib.parse
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Sequence

from pydantic import BaseModel, Field

from .columns import Columns
from .dialects import Dialect, Executor, get_dialect_for_scheme
from .model import Model
from .modes import ModeRegistry, default_registry
from .query import Query
from .transaction import Transaction, TransactionManager

logger = logging.getLogger("chronorm")


class ConnectionDetails(BaseModel):
    """Where to connect, and in which mode."""

    url: str
    mode: str = ""
    options: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_url(cls, url: str, mode: Optional[str] = None,
                 options: Optional[dict[str, str]] = None) -> ConnectionDetails:
        """Split the URL query string into ``mode`` and options; explicit arguments win."""
        base_url, _, query = url.partition("?")
        url_options = dict(urllib.parse.parse_qsl(query))
        url_mode = url_options.pop("mode", "")
        return cls(
            url=base_url,
            mode=url_mode if mode is None else mode,
            options={**url_options, **(options or {})},
        )

    @property
    def scheme(self) -> str:
        return urllib.parse.urlparse(self.url).scheme


class Connection:
    """A database connection: runs statements and persists models through its dialect."""

    def __init__(self, details: ConnectionDetails, registry: Optional[ModeRegistry] = None):
        self.details = details
        self.dialect: Dialect = get_dialect_for_scheme(details.scheme)
        applied = details.model_copy(deep=True)
        (registry or default_registry()).apply(self, applied)
        if applied.options:
            logger.warning("unused connection options: %s", ", ".join(sorted(applied.options)))
        self._transactions = TransactionManager(lambda: self.dialect.connect(details.url))

    @property
    def raw(self) -> Any:
        """The driver connection for the current thread (opened on first use)."""
        return self._transactions.get_connection()

    def close(self) -> None:
        self._transactions.close()

    def _autocommit(self) -> None:
        if self._transactions.level == 0:
            self.raw.commit()

    def _run(self, sql: str, parameters: Sequence[Any], fetch: bool, rows_as_dicts: bool = False):
        parameters = tuple(self.dialect.adapt_value(p) for p in parameters)
        logger.debug("%s %r", sql, parameters)
        raw = self.raw
        cursor = raw.cursor()
        try:
            cursor.execute(sql, parameters)
            if not fetch:
                result = cursor.rowcount
            elif rows_as_dicts:
                names = [d[0] for d in cursor.description]
                result = [dict(zip(names, row)) for row in cursor.fetchall()]
            else:
                result = [tuple(row) for row in cursor.fetchall()]
        except Exception:
            if self._transactions.level == 0:
                raw.rollback()
            raise
        finally:
            cursor.close()
        self._autocommit()
        return result

    # Executor

    def execute(self, sql: str, parameters: Sequence[Any] = ()) -> int:
        """Run a statement (placeholders already in the driver's style) and return the affected row count."""
        return self._run(sql, parameters, fetch=False)

    def fetch(self, sql: str, parameters: Sequence[Any] = (), rows_as_dicts: bool = False) -> list:
        """Run a statement and return its rows, as tuples or as dicts."""
        return self._run(sql, parameters, fetch=True, rows_as_dicts=rows_as_dicts)

    def execute_script(self, sql: str) -> None:
        """Run a multi-statement script, typically DDL from ``schema_translator()``."""
        logger.debug("script:\n%s", sql)
        self.dialect.execute_script(self.raw, sql)
        self._autocommit()

    # schema

    def schema_translator(self):
        return self.dialect.schema_translator()

    # persistence

    def create(self, model: Model, executor: Optional[Executor] = None) -> Model:
        """Insert ``model``; sets its id when generated by the database."""
        columns = Columns.for_model(type(model))
        self.dialect.create(executor or self, model, columns)
        return model

    def update(self, model: Model, executor: Optional[Executor] = None) -> Model:
        columns = Columns.for_model(type(model))
        self.dialect.update(executor or self, model, columns)
        return model

    def destroy(self, model: Model, executor: Optional[Executor] = None) -> None:
        self.dialect.destroy(executor or self, model)

    # queries and transactions

    def q(self, model: type[Model]) -> Query:
        """Return a Query on the table of ``model``."""
        return Query.for_model(self, model)

    def query(self, table_name: str) -> Query:
        """Return a Query on a table, rows coming back as dicts."""
        return Query(connection=self, table_name=table_name)

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """Run statements atomically; nested calls use SAVEPOINTs.

        Mutations made through the yielded Transaction (including the history
        writes of a history connection) commit or roll back together.
        """
        with self._transactions.transaction(self) as transaction:
            yield transaction


_connections: dict[str, Connection] = {}


def connect(database_url: str, name: str = "default", mode: Optional[str] = None,
            options: Optional[dict[str, str]] = None,
            registry: Optional[ModeRegistry] = None) -> Connection:
    """Build a Connection for ``database_url`` and register it under ``name``."""
    if not isinstance(database_url, str):
        raise ValueError("database_url must be a str")
    details = ConnectionDetails.from_url(database_url, mode=mode, options=options)
    connection = Connection(details, registry=registry)
    previous = _connections.get(name)
    if previous is not None:
        previous.close()
    _connections[name] = connection
    return connection


def get_connection(name: str = "default") -> Connection:
    try:
        return _connections[name]
    except KeyError as error:
        raise ValueError(f"No connection configured with name=`{name}`") from error
