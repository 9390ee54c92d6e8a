import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Sequence

from .errors import TransactionError

logger = logging.getLogger("chronorm")


class TransactionManager:

    def __init__(self, connection_factory: Callable[[], Any]):
        """
        Initialize the transaction manager.

        Args:
            connection_factory: A callable that returns a raw database connection
        """
        self._connection_factory = connection_factory
        self._local = threading.local()

    # get connection (built on first call)

    def get_connection(self):
        """Get or create a raw connection for the current thread"""
        if not hasattr(self._local, 'connection'):
            self._local.connection = self._connection_factory()
        return self._local.connection

    def close(self):
        """Close the current thread's raw connection, if any"""
        connection = getattr(self._local, 'connection', None)
        if connection is not None:
            connection.close()
            del self._local.connection

    # transaction level

    @property
    def level(self) -> int:
        """Current transaction nesting level (0 outside any transaction)"""
        return getattr(self._local, 'transaction_level', 0)

    def _set_level(self, level):
        self._local.transaction_level = level

    # actual transaction itself

    @contextmanager
    def transaction(self, executor):
        """
        Context manager for database transactions with SAVEPOINT support.

        Args:
            executor: The Connection statements are run through

        Yields:
            Transaction: Transaction object for executing statements
        """
        connection = self.get_connection()
        new_level = self.level + 1
        self._set_level(new_level)

        # Create savepoint name for nested transactions
        savepoint_name = f"savepoint_{new_level}" if new_level > 1 else None

        transaction_obj = Transaction(executor, self, new_level)

        try:
            if savepoint_name:
                logger.debug("SAVEPOINT %s", savepoint_name)
                connection.cursor().execute(f"SAVEPOINT {savepoint_name}")

            yield transaction_obj

            if savepoint_name:
                logger.debug("RELEASE SAVEPOINT %s", savepoint_name)
                connection.cursor().execute(f"RELEASE SAVEPOINT {savepoint_name}")
            else:
                logger.debug("COMMIT")
                connection.commit()

        except Exception:
            if savepoint_name:
                logger.debug("ROLLBACK TO SAVEPOINT %s", savepoint_name)
                connection.cursor().execute(f"ROLLBACK TO SAVEPOINT {savepoint_name}")
            else:
                logger.debug("ROLLBACK")
                connection.rollback()
            raise
        finally:
            transaction_obj._active = False
            self._set_level(new_level - 1)


class Transaction:

    def __init__(self, executor, manager, level):
        self._executor = executor
        self._manager = manager
        self._level = level
        self._active = True

    @property
    def dialect(self):
        return self._executor.dialect

    def _check(self):
        if not self._active:
            raise TransactionError("Transaction is no longer active")

        # Check if we're trying to use a higher-level transaction
        current_level = self._manager.level
        if current_level > self._level:
            raise TransactionError(
                f"Cannot use transaction level {self._level} from level {current_level}. "
                "Higher-level transactions cannot be accessed from nested transactions."
            )

    def execute(self, sql: str, parameters: Sequence[Any] = ()) -> int:
        """
        Execute a statement within this transaction.

        Returns:
            Affected row count

        Raises:
            TransactionError: If the transaction ended, or if a nested transaction is open
        """
        self._check()
        return self._executor.execute(sql, parameters)

    def fetch(self, sql: str, parameters: Sequence[Any] = (), rows_as_dicts: bool = False) -> list:
        """Run a statement within this transaction and return its rows."""
        self._check()
        return self._executor.fetch(sql, parameters, rows_as_dicts=rows_as_dicts)

    def create(self, model):
        return self._executor.create(model, executor=self)

    def update(self, model):
        return self._executor.update(model, executor=self)

    def destroy(self, model):
        return self._executor.destroy(model, executor=self)
