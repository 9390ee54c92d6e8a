"""Table descriptions handed to schema translators.

A migration operation is described by a ``SchemaTable``. For CREATE TABLE it
holds the full structure; for column operations ``columns`` holds the affected
column(s) (``[old, new]`` for a rename) while ``indexes`` lists the indexes the
table currently carries, which some translators must rebuild.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from ..errors import SchemaError


class SchemaColumn(BaseModel):
    """A column: name, abstract type (e.g. ``string``, ``integer``), options."""

    name: str
    col_type: str
    primary: bool = False
    options: dict[str, Any] = Field(default_factory=dict)

    @property
    def nullable(self) -> bool:
        return bool(self.options.get("null", False))


class Index(BaseModel):
    name: str
    columns: list[str]
    unique: bool = False


class ForeignKeyRef(BaseModel):
    table: str
    columns: list[str]


class ForeignKey(BaseModel):
    name: str
    column: str
    references: ForeignKeyRef
    options: dict[str, Any] = Field(default_factory=dict)


class SchemaTable(BaseModel):
    """Description of a table, or of the part of a table a migration touches."""

    name: str
    columns: list[SchemaColumn] = Field(default_factory=list)
    indexes: list[Index] = Field(default_factory=list)
    foreign_keys: list[ForeignKey] = Field(default_factory=list)
    options: dict[str, Any] = Field(default_factory=dict)

    def has_column(self, name: str) -> bool:
        return any(c.name == name for c in self.columns)

    def column(self, name: str, col_type: str, options: dict[str, Any] | None = None) -> SchemaTable:
        """Append a column; raises SchemaError if a column with that name exists."""
        if not name:
            raise SchemaError("column name cannot be empty")
        if self.has_column(name):
            raise SchemaError(f"duplicated column {name} in table {self.name}")
        options = dict(options or {})
        primary = bool(options.pop("primary", False))
        self.columns.append(SchemaColumn(name=name, col_type=col_type, primary=primary, options=options))
        return self

    def index(self, columns: str | list[str], name: str | None = None, unique: bool = False) -> SchemaTable:
        if isinstance(columns, str):
            columns = [columns]
        if name is None:
            name = f"{self.name}_{'_'.join(columns)}_idx"
        self.indexes.append(Index(name=name, columns=list(columns), unique=unique))
        return self

    def foreign_key(self, column: str, table: str, columns: list[str] | None = None,
                    name: str | None = None, **options: Any) -> SchemaTable:
        columns = columns or ["id"]
        if name is None:
            name = f"{self.name}_{table}_{'_'.join(columns)}_fk"
        self.foreign_keys.append(ForeignKey(
            name=name,
            column=column,
            references=ForeignKeyRef(table=table, columns=columns),
            options=options,
        ))
        return self

    def disable_timestamps(self) -> SchemaTable:
        """Keep translators from adding ``created_at``/``updated_at`` on create."""
        self.options["timestamps"] = False
        return self

    @property
    def timestamps_enabled(self) -> bool:
        return self.options.get("timestamps", True) is not False

    @property
    def primary_keys(self) -> list[str]:
        return [c.name for c in self.columns if c.primary]
