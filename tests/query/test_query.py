"""Tests for chronorm.query: building, rendering and running queries."""

import pytest

from chronorm.query import Query
from tests.helpers import User


@pytest.fixture
def users(setup_db):
    for name, email in (("alice", "a@example.com"), ("bob", None), ("carol", "c@example.com")):
        setup_db.create(User(name=name, email=email))
    return setup_db


class TestQueryBasics:
    """Query construction, cloning and rendering."""

    def test_for_model(self, setup_db):
        q = setup_db.q(User)
        assert q.table_name == "users"
        assert q.model is User
        assert q.alias == "users"

    def test_select_lists_model_columns_with_alias(self, setup_db):
        assert setup_db.q(User).sql == (
            'SELECT "users"."id", "users"."name", "users"."email"\n'
            'FROM "users" AS "users"'
        )

    def test_select_without_model(self, setup_db):
        assert setup_db.query("users").sql == 'SELECT "users".*\nFROM "users" AS "users"'

    def test_clone_query_with(self, setup_db):
        q = setup_db.q(User).limit(5)
        q2 = q.clone_query_with(limit_value=10)
        assert q2.model is User
        assert q2.limit_value == 10
        assert q.limit_value == 5

    def test_builders_do_not_mutate(self, setup_db):
        q = setup_db.q(User)
        q.where("name = ?", "x").order_by("name").global_where("1 = 1")
        assert q.where_clauses == []
        assert q.order_by_clauses == []
        assert q.global_clauses == []

    def test_full_rendering(self, setup_db):
        q = (
            setup_db.q(User)
            .where("name LIKE ?", "a%")
            .where("email IS NOT NULL")
            .order_by('"users"."name" DESC', "id")
            .limit(10)
            .offset(20)
        )
        assert q.sql == (
            'SELECT "users"."id", "users"."name", "users"."email"\n'
            'FROM "users" AS "users"\n'
            "WHERE (name LIKE ?)\n"
            "AND (email IS NOT NULL)\n"
            'ORDER BY "users"."name" DESC, id\n'
            "LIMIT 10\n"
            "OFFSET 20"
        )
        assert q.values == ("a%",)

    def test_where_alias_token(self, setup_db):
        q = setup_db.q(User).where("%TABLE_ALIAS%.name = ?", "bob")
        assert q.sql.endswith('WHERE "users".name = ?')

    def test_table_pattern(self, setup_db):
        q = setup_db.q(User).clone_query_with(table_pattern="archived_{}")
        assert 'FROM "archived_users" AS "users"' in q.sql


class TestQueryExecution:

    def test_all_hydrates_models(self, users):
        result = users.q(User).order_by("id").all()
        assert [u.name for u in result] == ["alice", "bob", "carol"]
        assert all(isinstance(u, User) for u in result)
        assert result[1].email is None

    def test_where_filters(self, users):
        result = users.q(User).where("email IS NOT NULL").where("name <> ?", "alice").all()
        assert [u.name for u in result] == ["carol"]

    def test_first(self, users):
        assert users.q(User).order_by("name DESC").first().name == "carol"
        assert users.q(User).where("name = ?", "nobody").first() is None

    def test_limit_offset(self, users):
        result = users.q(User).order_by("id").limit(1).offset(1).all()
        assert [u.name for u in result] == ["bob"]

    def test_count_and_exists(self, users):
        assert users.q(User).count() == 3
        assert users.q(User).where("email IS NULL").count() == 1
        assert users.q(User).where("name = ?", "bob").exists()
        assert not users.q(User).where("name = ?", "nobody").exists()

    def test_rows_as_dicts(self, users):
        rows = users.query("users").where("name = ?", "bob").rows()
        assert len(rows) == 1
        assert rows[0]["name"] == "bob"
        assert {"id", "name", "email", "created_at", "updated_at"} == set(rows[0])

    def test_all_requires_model(self, users):
        with pytest.raises(ValueError, match="requires a query built for a model"):
            users.query("users").all()

    def test_scope_applies_functions_in_order(self, users):
        def only_with_email(q: Query) -> Query:
            return q.where("email IS NOT NULL")

        def by_name(q: Query) -> Query:
            return q.order_by("name DESC")

        result = users.q(User).scope(only_with_email, by_name).all()
        assert [u.name for u in result] == ["carol", "alice"]

    def test_placeholders_translated_for_format_drivers(self, setup_db):
        from unittest.mock import MagicMock

        from chronorm.dialects import PostgresDialect

        connection = MagicMock()
        connection.dialect = PostgresDialect()
        connection.fetch.return_value = [(4,)]
        q = Query(connection=connection, table_name="users").where("name = ?", "bob")
        assert q.count() == 4
        connection.fetch.assert_called_once_with(
            'SELECT COUNT(*)\nFROM "users" AS "users"\nWHERE name = %s', ("bob",), rows_as_dicts=False
        )
