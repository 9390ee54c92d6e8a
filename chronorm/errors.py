"""Exception types raised by chronorm."""


class ChronormError(Exception):
    """Base class for all chronorm errors."""


class ConfigurationError(ChronormError):
    """Invalid connection setup: unknown or duplicate mode, bad options."""


class SchemaError(ChronormError):
    """A schema description or migration operation cannot be translated."""


class TransactionError(ChronormError):
    """Misuse of a transaction (inactive, or used from a nested level)."""


class HistoryWriteError(ChronormError):
    """Writing to a history table failed after the base mutation succeeded.

    The base row is left as the base dialect wrote it; ``stage`` tells which
    history statement failed ("historical insert" or "historical delete").
    """

    def __init__(self, stage: str, cause: BaseException):
        super().__init__(stage, cause)
        self.stage = stage
        self.cause = cause

    def __str__(self) -> str:
        return f"{self.stage}: {self.cause}"


class HistoryNotSupportedError(ChronormError, TypeError):
    """A time-travel scope was applied to a query whose dialect keeps no history."""
