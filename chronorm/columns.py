"""Column sets derived from Model classes.

A ``Columns`` instance lists the columns of one table in declaration order,
each flagged readable and/or writeable. Per-field behaviour is declared with
pydantic's ``json_schema_extra``::

    class User(Model):
        name: str
        score: int = Field(0, json_schema_extra={"rw": "r"})   # read-only
        cache: dict = Field({}, json_schema_extra={"db": "-"})  # not a column
"""

from __future__ import annotations

import inspect
from typing import Any, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field

from .model import Model


class _Quoter(Protocol):
    def quote(self, name: str) -> str: ...


def _declares(model: type[BaseModel], name: str) -> bool:
    """True if ``model`` or one of its bases below Model declares the field ``name``."""
    for base in model.__mro__:
        if base is Model:
            return False
        if name in inspect.get_annotations(base):
            return True
    return False


class ColumnInfo(BaseModel):
    """One column of a column set."""

    model_config = ConfigDict(frozen=True)

    name: str
    readable: bool = True
    writeable: bool = True


class Columns(BaseModel):
    """Ordered set of columns for a table, with SQL renderings."""

    table_name: str
    id_field: str = "id"
    alias: Optional[str] = None
    columns: dict[str, ColumnInfo] = Field(default_factory=dict)

    @classmethod
    def for_model(cls, model: type[BaseModel], table_name: Optional[str] = None,
                  alias: Optional[str] = None) -> Columns:
        """Build the column set for a model class from its pydantic fields."""
        if table_name is None:
            table_name = model._get_table_name()
        result = cls(
            table_name=table_name,
            id_field=getattr(model, "ID_FIELD", "id"),
            alias=alias,
        )
        skip_id = result.id_field != "id" and not _declares(model, "id")
        for name, info in model.model_fields.items():
            if name == "id" and skip_id:
                continue
            extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
            if extra.get("db") == "-":
                continue
            rw = extra.get("rw", "rw")
            result.columns[name] = ColumnInfo(name=name, readable="r" in rw, writeable="w" in rw)
        return result

    def add(self, *names: str) -> list[ColumnInfo]:
        """Add readable and writeable columns; names already present are left untouched."""
        added = []
        for name in names:
            if name in self.columns:
                continue
            column = ColumnInfo(name=name)
            self.columns[name] = column
            added.append(column)
        return added

    def remove(self, *names: str) -> None:
        for name in names:
            self.columns.pop(name, None)

    def _subset(self, predicate) -> Columns:
        return self.model_copy(update={
            "columns": {name: c for name, c in self.columns.items() if predicate(c)},
        })

    def readable(self) -> Columns:
        """Columns that can be selected."""
        return self._subset(lambda c: c.readable)

    def writeable(self) -> Columns:
        """Columns that can be inserted or updated; the id column is never writeable."""
        return self._subset(lambda c: c.writeable and c.name != self.id_field)

    def persisted(self) -> Columns:
        """Every column stored in the table, the id included and placed first."""
        result = self._subset(lambda c: c.readable or c.writeable)
        if self.id_field not in result.columns:
            result.columns = {self.id_field: ColumnInfo(name=self.id_field), **result.columns}
        return result

    @property
    def names(self) -> list[str]:
        return list(self.columns)

    def __len__(self) -> int:
        return len(self.columns)

    def __contains__(self, name: Any) -> bool:
        return name in self.columns

    def quoted_string(self, quoter: _Quoter) -> str:
        """Comma-separated quoted column names (e.g. for an INSERT column list)."""
        return ", ".join(quoter.quote(name) for name in self.columns)

    def select_string(self, quoter: _Quoter) -> str:
        """Comma-separated select list, qualified by the alias when one is set."""
        if self.alias is None:
            return self.quoted_string(quoter)
        alias = quoter.quote(self.alias)
        return ", ".join(f"{alias}.{quoter.quote(name)}" for name in self.columns)

    def symbolized_string(self) -> str:
        """One ``?`` placeholder per column."""
        return ", ".join("?" for _ in self.columns)

    def update_string(self, quoter: _Quoter) -> str:
        """``a = ?, b = ?`` assignments for an UPDATE."""
        return ", ".join(f"{quoter.quote(name)} = ?" for name in self.columns)
