"""Connection modes.

A mode is applied once, when a Connection is built, and may replace the
connection's dialect (the "history" mode wraps it in a HistoryDialect).
Modes live in an explicit ModeRegistry handed to the connection; build one
per process (or per test) with ``default_registry()``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from .dialects import DEFAULT_SUFFIX, HistoryDialect
from .errors import ConfigurationError

if TYPE_CHECKING:
    from .connection import Connection, ConnectionDetails

logger = logging.getLogger("chronorm")

ModeFunc = Callable[["Connection", "ConnectionDetails"], None]


class ModeRegistry:
    """Mapping of mode names to the functions that set them up."""

    def __init__(self):
        self._modes: dict[str, ModeFunc] = {}

    def register(self, name: str, func: ModeFunc) -> None:
        if name in self._modes:
            raise ConfigurationError(f"mode {name!r} is already registered")
        self._modes[name] = func

    def __contains__(self, name: object) -> bool:
        return name in self._modes

    @property
    def names(self) -> list[str]:
        return sorted(self._modes)

    def apply(self, connection: "Connection", details: "ConnectionDetails") -> None:
        try:
            func = self._modes[details.mode]
        except KeyError:
            raise ConfigurationError(
                f"unknown mode {details.mode!r} (available: {', '.join(repr(n) for n in self.names)})"
            ) from None
        func(connection, details)


def _default_mode(connection: "Connection", details: "ConnectionDetails") -> None:
    pass


def history_mode(connection: "Connection", details: "ConnectionDetails") -> None:
    """Wrap the connection's dialect so that every mutation is recorded in history tables.

    Option ``suffix`` (default ``_history``) names the history tables; it is
    consumed from ``details.options``.
    """
    suffix = details.options.pop("suffix", "") or DEFAULT_SUFFIX
    logger.info("history mode enabled (suffix %s)", suffix)
    connection.dialect = HistoryDialect(dialect=connection.dialect, suffix=suffix)


def default_registry() -> ModeRegistry:
    """Return a new registry with the built-in modes: "", "default" and "history"."""
    registry = ModeRegistry()
    registry.register("", _default_mode)
    registry.register("default", _default_mode)
    registry.register("history", history_mode)
    return registry
