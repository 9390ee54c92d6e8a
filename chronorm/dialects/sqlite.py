"""SQLite dialect."""

import datetime
import decimal
import logging
import urllib.parse
import uuid
from typing import Any, ClassVar

from ..schema import SqliteTranslator
from .base import Dialect

logger = logging.getLogger(__name__)


class SqliteDialect(Dialect):
    """Dialect for SQLite (scheme sqlite)."""

    SUPPORTED_SCHEMA: ClassVar[tuple[str, ...]] = ("sqlite", "sqlite3")

    def connect(self, url: str):
        import sqlite3
        parsed = urllib.parse.urlparse(url)
        path = (parsed.path or "")[1:] or parsed.hostname or ":memory:"
        logger.info("Connecting to SQLite database %s", path)
        conn = sqlite3.connect(path)
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def schema_translator(self) -> SqliteTranslator:
        return SqliteTranslator()

    def adapt_value(self, value: Any) -> Any:
        # datetimes are stored as text; one fixed format keeps them comparable
        if isinstance(value, datetime.datetime):
            if value.tzinfo is not None:
                value = value.astimezone(datetime.timezone.utc)
            return value.isoformat(sep=" ", timespec="microseconds")
        if isinstance(value, (datetime.date, datetime.time)):
            return value.isoformat()
        if isinstance(value, (decimal.Decimal, uuid.UUID)):
            return str(value)
        return value

    def execute_script(self, connection, sql: str) -> None:
        connection.executescript(sql)
