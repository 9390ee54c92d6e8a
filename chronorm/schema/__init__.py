"""Table descriptions and DDL translators (one per engine, plus the history decorator)."""

from .table import ForeignKey, ForeignKeyRef, Index, SchemaColumn, SchemaTable
from .base import SchemaTranslator, SqlTranslator
from .sqlite import SqliteTranslator
from .postgres import PostgresTranslator
from .mysql import MysqlTranslator
from .history import HISTORICAL_TABLE_ERROR, HistoryTranslator

__all__ = [
    "ForeignKey",
    "ForeignKeyRef",
    "Index",
    "SchemaColumn",
    "SchemaTable",
    "SchemaTranslator",
    "SqlTranslator",
    "SqliteTranslator",
    "PostgresTranslator",
    "MysqlTranslator",
    "HistoryTranslator",
    "HISTORICAL_TABLE_ERROR",
]
