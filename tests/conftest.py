import datetime

import pytest

from chronorm.connection import connect
from chronorm.schema import SchemaTable

T0 = datetime.datetime(2026, 1, 1, 12, 0, 0, tzinfo=datetime.timezone.utc)


class FakeClock:
    """Deterministic clock for history timestamps."""

    def __init__(self, now: datetime.datetime = T0):
        self.now = now
        self.calls = 0

    def __call__(self) -> datetime.datetime:
        self.calls += 1
        return self.now

    def advance(self, **kwargs) -> datetime.datetime:
        self.now += datetime.timedelta(**kwargs)
        return self.now


def users_table() -> SchemaTable:
    return (
        SchemaTable(name="users")
        .column("id", "integer", {"primary": True})
        .column("name", "string")
        .column("email", "string", {"null": True})
        .index("email", unique=True)
    )


@pytest.fixture(scope="function")
def db_url(tmp_path):
    """URL of a temporary file SQLite database for each test."""
    return f"sqlite:///{tmp_path / 'test.sqlite3'}"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def setup_db(db_url):
    """Plain connection (no history) with a users table."""
    connection = connect(db_url)
    connection.execute_script(connection.schema_translator().create_table(users_table()))
    yield connection
    connection.close()


@pytest.fixture
def history_db(db_url, clock):
    """History-mode connection on a fake clock, with users and users_history tables."""
    connection = connect(db_url, mode="history")
    connection.dialect = connection.dialect.model_copy(update={"clock": clock})
    connection.execute_script(connection.schema_translator().create_table(users_table()))
    yield connection
    connection.close()
