"""Query builder and execution.

A Query selects from one table (optionally through a table name template,
e.g. the history table of a model) with WHERE clauses, JOINs, ORDER BY,
LIMIT and OFFSET. Every builder method returns a new Query.

WHERE and ON fragments are raw SQL with ``?`` placeholders; ``%TABLE_ALIAS%``
in a fragment stands for the alias of the table it applies to. Global clauses
are ANDed into the ON of every join, each with its own join's alias.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from pydantic import BaseModel, Field

from .clauses import Clause, JoinClause, JoinType, clauses_values, join_clauses
from .columns import Columns
from .model import Model

ScopeFunc = Callable[["Query"], "Query"]


class Query(BaseModel):
    """Fluent SELECT builder bound to a connection."""

    model_config = {"arbitrary_types_allowed": True}

    connection: Any
    """The Connection this query runs on; its dialect quotes and translates."""
    table_name: str
    """Name of the queried table; also its alias in the rendered SQL."""
    model: Optional[type[Model]] = None
    """Model class rows are hydrated into by all() and first()."""
    table_pattern: str = "{}"
    """Template turning a table name into the name actually read from."""
    where_clauses: list[Clause] = Field(default_factory=list)
    global_clauses: list[Clause] = Field(default_factory=list)
    join_clauses: list[JoinClause] = Field(default_factory=list)
    order_by_clauses: list[str] = Field(default_factory=list)
    limit_value: Optional[int] = None
    offset_value: Optional[int] = None

    @classmethod
    def for_model(cls, connection: Any, model: type[Model]) -> Query:
        return cls(connection=connection, table_name=model._get_table_name(), model=model)

    @property
    def _dialect(self):
        return self.connection.dialect

    @property
    def alias(self) -> str:
        return self.table_name

    def clone_query_with(self, **changes: Any) -> Query:
        """Return a new Query with the same state except for the given overrides."""
        state = {
            "where_clauses": list(self.where_clauses),
            "global_clauses": list(self.global_clauses),
            "join_clauses": list(self.join_clauses),
            "order_by_clauses": list(self.order_by_clauses),
        }
        state.update(changes)
        return self.model_copy(update=state)

    # builders

    def where(self, fragment: str, *args: Any) -> Query:
        """Add a condition, e.g. ``where("name = ?", "bob")``."""
        return self.clone_query_with(
            where_clauses=self.where_clauses + [Clause(fragment=fragment, arguments=args)]
        )

    def global_where(self, fragment: str, *args: Any) -> Query:
        """Add a condition to the ON clause of every join (use ``%TABLE_ALIAS%``)."""
        return self.clone_query_with(
            global_clauses=self.global_clauses + [Clause(fragment=fragment, arguments=args)]
        )

    def _join(self, join_type: JoinType, table: str, on: str, args: tuple[Any, ...]) -> Query:
        join = JoinClause(
            join_type=join_type,
            table=table,
            alias=table,
            on=(Clause(fragment=on, arguments=args),) if on else (),
        )
        return self.clone_query_with(join_clauses=self.join_clauses + [join])

    def join(self, table: str, on: str, *args: Any) -> Query:
        return self._join(JoinType.JOIN, table, on, args)

    def left_join(self, table: str, on: str, *args: Any) -> Query:
        return self._join(JoinType.LEFT, table, on, args)

    def right_join(self, table: str, on: str, *args: Any) -> Query:
        return self._join(JoinType.RIGHT, table, on, args)

    def left_outer_join(self, table: str, on: str, *args: Any) -> Query:
        return self._join(JoinType.LEFT_OUTER, table, on, args)

    def right_outer_join(self, table: str, on: str, *args: Any) -> Query:
        return self._join(JoinType.RIGHT_OUTER, table, on, args)

    def inner_join(self, table: str, on: str, *args: Any) -> Query:
        return self._join(JoinType.INNER, table, on, args)

    def scope(self, *scopes: ScopeFunc) -> Query:
        """Apply query transforms in order (e.g. ``history_scope(instant)``)."""
        q = self
        for scope in scopes:
            q = scope(q)
        return q

    def order_by(self, *clauses: str) -> Query:
        return self.clone_query_with(order_by_clauses=self.order_by_clauses + list(clauses))

    def limit(self, limit: int) -> Query:
        return self.clone_query_with(limit_value=limit)

    def offset(self, offset: int) -> Query:
        return self.clone_query_with(offset_value=offset)

    # --- SQL-generating methods ---

    def table_reference(self, table: str) -> str:
        """``<actual table> AS <table>``, the actual table coming from the template."""
        quote = self._dialect.quote
        return f"{quote(self.table_pattern.format(table))} AS {quote(table)}"

    def _render_join(self, join: JoinClause) -> JoinClause:
        rendered = join.model_copy(update={
            "table": self.table_reference(join.table),
            "alias": self._dialect.quote(join.alias),
        })
        return rendered.attach(self.global_clauses)

    @property
    def joins(self) -> list[JoinClause]:
        """Join clauses as rendered: targets through the table template, global clauses attached."""
        return [self._render_join(j) for j in self.join_clauses]

    @property
    def _where(self) -> list[Clause]:
        alias = self._dialect.quote(self.alias)
        return [c.with_alias(alias) for c in self.where_clauses]

    def sql_select(self) -> str:
        if self.model is None:
            return f"{self._dialect.quote(self.alias)}.*"
        columns = Columns.for_model(self.model, self.table_name, alias=self.alias).readable()
        return columns.select_string(self._dialect)

    def sql_from(self) -> str:
        sql = "FROM " + self.table_reference(self.table_name)
        for join in self.joins:
            sql += "\n" + join.sql
        where = self._where
        if where:
            sql += "\nWHERE " + join_clauses(where, "\nAND ")
        return sql

    @property
    def sql(self) -> str:
        sql = f"SELECT {self.sql_select()}\n{self.sql_from()}"
        if self.order_by_clauses:
            sql += "\nORDER BY " + ", ".join(self.order_by_clauses)
        if self.limit_value is not None:
            sql += f"\nLIMIT {int(self.limit_value)}"
        if self.offset_value is not None:
            sql += f"\nOFFSET {int(self.offset_value)}"
        return sql

    @property
    def values(self) -> tuple[Any, ...]:
        """Bound values in placeholder order: joins first, then WHERE."""
        return clauses_values(self.joins) + clauses_values(self._where)

    # execution

    def _fetch(self, sql: str, rows_as_dicts: bool = False) -> list:
        sql = self._dialect.translate_sql(sql)
        return self.connection.fetch(sql, self.values, rows_as_dicts=rows_as_dicts)

    def rows(self) -> list[dict[str, Any]]:
        """Execute and return rows as dicts."""
        return self._fetch(self.sql, rows_as_dicts=True)

    def all(self) -> list[Model]:
        """Execute and return rows as instances of ``model``."""
        if self.model is None:
            raise ValueError("all() requires a query built for a model; use rows()")
        return [self.model.from_row(row) for row in self.rows()]

    def first(self) -> Optional[Model]:
        for instance in self.limit(1).all():
            return instance
        return None

    def count(self) -> int:
        rows = self._fetch(f"SELECT COUNT(*)\n{self.sql_from()}")
        return rows[0][0]

    def exists(self) -> bool:
        return self.count() > 0


__all__ = ["Query", "ScopeFunc"]
