"""Tests for chronorm.dialects: get_dialect_for_scheme and supported schemes."""

import pytest

from chronorm.dialects import (
    get_dialect_for_scheme,
    SqliteDialect,
    MysqlDialect,
    PostgresDialect,
)


def test_get_dialect_for_scheme_sqlite():
    d = get_dialect_for_scheme("sqlite")
    assert isinstance(d, SqliteDialect)


def test_get_dialect_for_scheme_normalizes_and_lowercases():
    d = get_dialect_for_scheme("SQLITE")
    assert isinstance(d, SqliteDialect)
    d = get_dialect_for_scheme("postgresql+psycopg2")
    assert isinstance(d, PostgresDialect)


def test_get_dialect_for_scheme_mysql():
    d = get_dialect_for_scheme("mysql")
    assert isinstance(d, MysqlDialect)


@pytest.mark.parametrize("scheme", ["postgresql", "postgres"])
def test_get_dialect_for_scheme_postgresql(scheme):
    d = get_dialect_for_scheme(scheme)
    assert isinstance(d, PostgresDialect)


def test_get_dialect_for_scheme_unsupported_raises():
    with pytest.raises(ValueError, match="Unsupported database scheme"):
        get_dialect_for_scheme("nosuch")
    with pytest.raises(ValueError, match="Unsupported database scheme"):
        get_dialect_for_scheme("mssql")


def test_get_dialect_for_scheme_empty_raises():
    with pytest.raises(ValueError, match="Unsupported database scheme"):
        get_dialect_for_scheme("")


def test_get_dialect_for_scheme_none_raises():
    with pytest.raises(ValueError, match="Unsupported database scheme"):
        get_dialect_for_scheme(None)
