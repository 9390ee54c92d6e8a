"""Reusable query transforms."""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .errors import HistoryNotSupportedError

if TYPE_CHECKING:
    from .query import Query, ScopeFunc


@runtime_checkable
class QueryHistoryer(Protocol):
    """A dialect able to point a query at its history tables."""

    def query_history(self, query: "Query", instant: datetime.datetime) -> "Query": ...


def supports_history(dialect: object) -> bool:
    """True if queries on ``dialect`` can be scoped with ``history_scope``."""
    return isinstance(dialect, QueryHistoryer)


def history_scope(instant: datetime.datetime) -> "ScopeFunc":
    """Return a scope reading history tables as they were at ``instant``.

    Rows come from the history tables instead of the base ones, limited to the
    versions current at ``instant``; joined tables are filtered the same way.
    An entity that did not exist yet at ``instant`` and one already destroyed
    both yield no row.

    Applying the scope to a query whose dialect keeps no history raises
    HistoryNotSupportedError: running the query unscoped would silently
    return current data.
    """
    def scope(query: "Query") -> "Query":
        dialect = query.connection.dialect
        if not supports_history(dialect):
            raise HistoryNotSupportedError(
                f"may only query history for history dialect (got {type(dialect).__name__})"
            )
        return dialect.query_history(query, instant)
    return scope
