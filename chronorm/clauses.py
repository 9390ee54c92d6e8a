"""SQL clauses: WHERE fragments and JOINs.

A ``Clause`` is a SQL fragment with ``?`` placeholders and its arguments,
in the same order. Clauses combine with ``&``. A ``JoinClause`` renders one
JOIN; its ``sql`` and ``values`` line up left to right like every other
clause.
"""

from __future__ import annotations

import enum
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field

ALIAS_TOKEN = "%TABLE_ALIAS%"
"""Stands for the alias of the table a global clause gets attached to."""


class Clause(BaseModel):
    """A SQL fragment and its positional arguments."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    fragment: str
    arguments: tuple[Any, ...] = Field(default_factory=tuple)

    @property
    def sql(self) -> str:
        return self.fragment

    @property
    def values(self) -> tuple[Any, ...]:
        return self.arguments

    def with_alias(self, alias: str) -> Clause:
        """Return a copy with every alias token replaced by ``alias``."""
        if ALIAS_TOKEN not in self.fragment:
            return self
        return Clause(fragment=self.fragment.replace(ALIAS_TOKEN, alias), arguments=self.arguments)

    def __and__(self, other: Clause) -> Clause:
        return Clause(
            fragment=f"({self.fragment}) AND ({other.fragment})",
            arguments=self.arguments + other.arguments,
        )


def join_clauses(clauses: Iterable[Clause], separator: str = " AND ") -> str:
    """Conjunction of ``clauses``; each is parenthesized when there are several."""
    clauses = list(clauses)
    if len(clauses) == 1:
        return clauses[0].sql
    return separator.join(f"({c.sql})" for c in clauses)


def clauses_values(clauses: Iterable[Clause]) -> tuple[Any, ...]:
    return sum((c.values for c in clauses), ())


class JoinType(str, enum.Enum):
    JOIN = "JOIN"
    LEFT = "LEFT JOIN"
    RIGHT = "RIGHT JOIN"
    LEFT_OUTER = "LEFT OUTER JOIN"
    RIGHT_OUTER = "RIGHT OUTER JOIN"
    INNER = "INNER JOIN"


class JoinClause(BaseModel):
    """One JOIN: kind, target table (``<table> AS <alias>``) and ON predicates."""

    model_config = ConfigDict(frozen=True)

    join_type: JoinType = JoinType.JOIN
    table: str
    """Join target; a Query stores the table name and renders ``"posts_history" AS "posts"``."""
    alias: str
    """Alias substituted for ``%TABLE_ALIAS%`` in attached clauses."""
    on: tuple[Clause, ...] = Field(default_factory=tuple)

    @property
    def sql(self) -> str:
        sql = f"{self.join_type.value} {self.table}"
        if self.on:
            sql += " ON " + join_clauses(self.on)
        return sql

    @property
    def values(self) -> tuple[Any, ...]:
        return clauses_values(self.on)

    def attach(self, clauses: Iterable[Clause]) -> JoinClause:
        """Return a copy with ``clauses`` appended to ON, aliased to this join's table."""
        extra = tuple(c.with_alias(self.alias) for c in clauses)
        if not extra:
            return self
        return self.model_copy(update={"on": self.on + extra})
