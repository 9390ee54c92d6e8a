"""Shared test models and helpers."""

from typing import ClassVar, Optional

from chronorm.model import Model


class User(Model):
    TABLE_NAME: ClassVar[str] = "users"

    name: str
    email: Optional[str] = None


def history_rows(connection, table: str = "users_history") -> list[dict]:
    """All rows of a history table, oldest version first."""
    return connection.fetch(
        f'SELECT * FROM "{table}" ORDER BY "id", "created_at"', rows_as_dicts=True
    )


def open_rows(connection, table: str = "users_history") -> list[dict]:
    return [row for row in history_rows(connection, table) if row["deleted_at"] is None]
