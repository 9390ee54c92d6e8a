"""chronorm: a lightweight pydantic data-access layer with transparent history tables."""

from .model import Model
from .columns import Columns
from .connection import Connection, ConnectionDetails, connect, get_connection
from .modes import ModeRegistry, default_registry
from .query import Query
from .scopes import history_scope, supports_history
from .errors import (
    ChronormError,
    ConfigurationError,
    HistoryNotSupportedError,
    HistoryWriteError,
    SchemaError,
    TransactionError,
)

__all__ = [
    "Model",
    "Columns",
    "Connection",
    "ConnectionDetails",
    "connect",
    "get_connection",
    "ModeRegistry",
    "default_registry",
    "Query",
    "history_scope",
    "supports_history",
    "ChronormError",
    "ConfigurationError",
    "HistoryNotSupportedError",
    "HistoryWriteError",
    "SchemaError",
    "TransactionError",
]
