"""Tests for chronorm.schema: table descriptions and engine translators."""

import sqlite3

import pytest

from chronorm.errors import SchemaError
from chronorm.schema import (
    Index,
    MysqlTranslator,
    PostgresTranslator,
    SchemaColumn,
    SchemaTable,
    SqliteTranslator,
    SqlTranslator,
)


def column_table(name, col_type="string", **options):
    return SchemaTable(name="users").column(name, col_type, options)


class TestSchemaTable:

    def test_column_builder(self):
        table = SchemaTable(name="t").column("id", "integer", {"primary": True}).column("x", "string", {"null": True})
        assert [c.name for c in table.columns] == ["id", "x"]
        assert table.primary_keys == ["id"]
        assert table.columns[0].options == {}
        assert table.columns[1].nullable

    def test_duplicate_column(self):
        table = SchemaTable(name="t").column("x", "string")
        with pytest.raises(SchemaError, match="duplicated column x in table t"):
            table.column("x", "integer")

    def test_empty_column_name(self):
        with pytest.raises(SchemaError):
            SchemaTable(name="t").column("", "string")

    def test_index_default_name(self):
        table = SchemaTable(name="t").index(["a", "b"], unique=True).index("c", name="custom")
        assert table.indexes == [
            Index(name="t_a_b_idx", columns=["a", "b"], unique=True),
            Index(name="custom", columns=["c"]),
        ]

    def test_foreign_key_default_name(self):
        table = SchemaTable(name="posts").foreign_key("user_id", "users", on_delete="CASCADE")
        fk = table.foreign_keys[0]
        assert fk.name == "posts_users_id_fk"
        assert fk.references.columns == ["id"]
        assert fk.options == {"on_delete": "CASCADE"}

    def test_timestamps(self):
        table = SchemaTable(name="t")
        assert table.timestamps_enabled
        assert table.disable_timestamps() is table
        assert not table.timestamps_enabled


class TestSqlTranslator:

    def test_create_table(self):
        table = (
            SchemaTable(name="users")
            .column("id", "integer", {"primary": True})
            .column("name", "string", {"size": 64, "default": "x"})
            .column("active", "bool", {"default": True})
            .index("name", unique=True)
        )
        assert SqlTranslator().create_table(table) == (
            'CREATE TABLE "users" (\n'
            '"id" INTEGER PRIMARY KEY,\n'
            '"name" VARCHAR(64) NOT NULL DEFAULT \'x\',\n'
            '"active" BOOLEAN NOT NULL DEFAULT TRUE,\n'
            '"created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,\n'
            '"updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP\n'
            ');\n'
            'CREATE UNIQUE INDEX "users_name_idx" ON "users" ("name");'
        )

    def test_create_table_composite_key_and_foreign_key(self):
        table = (
            SchemaTable(name="members")
            .column("group_id", "integer", {"primary": True})
            .column("user_id", "integer", {"primary": True})
            .foreign_key("user_id", "users", on_delete="CASCADE")
            .disable_timestamps()
        )
        assert SqlTranslator().create_table(table) == (
            'CREATE TABLE "members" (\n'
            '"group_id" INTEGER NOT NULL,\n'
            '"user_id" INTEGER NOT NULL,\n'
            'PRIMARY KEY ("group_id", "user_id"),\n'
            'FOREIGN KEY ("user_id") REFERENCES "users" ("id") ON DELETE CASCADE\n'
            ');'
        )

    def test_create_table_without_columns(self):
        with pytest.raises(SchemaError, match="without columns"):
            SqlTranslator().create_table(SchemaTable(name="t").disable_timestamps())

    def test_simple_operations(self):
        translator = SqlTranslator()
        assert translator.drop_table(SchemaTable(name="t")) == 'DROP TABLE "t";'
        assert translator.rename_table([SchemaTable(name="a"), SchemaTable(name="b")]) == \
            'ALTER TABLE "a" RENAME TO "b";'
        assert translator.add_column(column_table("email", null=True)) == \
            'ALTER TABLE "users" ADD COLUMN "email" VARCHAR(255);'
        assert translator.drop_column(column_table("email")) == 'ALTER TABLE "users" DROP COLUMN "email";'
        renamed = SchemaTable(name="users").column("a", "string").column("b", "string")
        assert translator.rename_column(renamed) == 'ALTER TABLE "users" RENAME COLUMN "a" TO "b";'

    def test_change_column(self):
        assert SqlTranslator().change_column(column_table("age", "integer", null=True, default=0)) == (
            'ALTER TABLE "users" ALTER COLUMN "age" TYPE INTEGER, '
            'ALTER COLUMN "age" DROP NOT NULL, ALTER COLUMN "age" SET DEFAULT 0;'
        )

    def test_index_operations(self):
        translator = SqlTranslator()
        table = SchemaTable(name="users").index("email", unique=True)
        assert translator.add_index(table) == 'CREATE UNIQUE INDEX "users_email_idx" ON "users" ("email");'
        assert translator.drop_index(table) == 'DROP INDEX "users_email_idx";'
        table.index("email", name="by_email")
        assert translator.rename_index(table) == 'ALTER INDEX "users_email_idx" RENAME TO "by_email";'

    @pytest.mark.parametrize("operation", ["add_column", "change_column", "drop_column"])
    def test_missing_column(self, operation):
        with pytest.raises(SchemaError, match="requires a column"):
            getattr(SqlTranslator(), operation)(SchemaTable(name="t"))

    def test_missing_pairs(self):
        translator = SqlTranslator()
        with pytest.raises(SchemaError, match="old and a new table"):
            translator.rename_table([SchemaTable(name="a")])
        with pytest.raises(SchemaError, match="old and a new column"):
            translator.rename_column(column_table("a"))
        with pytest.raises(SchemaError, match="requires an index"):
            translator.drop_index(SchemaTable(name="t"))

    def test_default_values(self):
        translator = SqlTranslator()
        assert translator.default_value(None) == "NULL"
        assert translator.default_value(1.5) == "1.5"
        assert translator.default_value("it's") == "'it''s'"


class TestSqliteTranslator:

    def test_types_and_autoincrement(self):
        translator = SqliteTranslator()
        assert translator.primary_column_definition(SchemaColumn(name="id", col_type="integer", primary=True)) == \
            '"id" INTEGER PRIMARY KEY AUTOINCREMENT'
        assert translator.column_type(SchemaColumn(name="x", col_type="string")) == "TEXT"
        assert translator.default_value(False) == "0"

    def test_change_column_unsupported(self):
        with pytest.raises(SchemaError, match="cannot change column users.age"):
            SqliteTranslator().change_column(column_table("age", "integer"))

    def test_drop_column_rebuilds_indexes(self):
        table = column_table("email").index("email", unique=True).index("name")
        assert SqliteTranslator().drop_column(table) == (
            'DROP INDEX IF EXISTS "users_email_idx";\n'
            'DROP INDEX IF EXISTS "users_name_idx";\n'
            'ALTER TABLE "users" DROP COLUMN "email";\n'
            'CREATE INDEX "users_name_idx" ON "users" ("name");'
        )

    def test_rename_index_recreates(self):
        table = SchemaTable(name="users").index("email", unique=True)
        table.indexes.append(Index(name="by_email", columns=[]))
        assert SqliteTranslator().rename_index(table) == (
            'DROP INDEX IF EXISTS "users_email_idx";\n'
            'CREATE UNIQUE INDEX "by_email" ON "users" ("email");'
        )

    def test_script_runs_on_sqlite(self):
        translator = SqliteTranslator()
        table = (
            SchemaTable(name="users")
            .column("id", "integer", {"primary": True})
            .column("name", "string")
            .column("email", "string", {"null": True})
            .index("email", unique=True)
            .index("name")
        )
        connection = sqlite3.connect(":memory:")
        connection.executescript(translator.create_table(table))
        connection.executescript(translator.drop_column(column_table("email").model_copy(
            update={"indexes": table.indexes}
        )))
        columns = [row[1] for row in connection.execute('PRAGMA table_info("users")')]
        indexes = [row[1] for row in connection.execute('PRAGMA index_list("users")')]
        assert columns == ["id", "name", "created_at", "updated_at"]
        assert indexes == ["users_name_idx"]
        connection.close()


class TestPostgresTranslator:

    def test_serial_and_types(self):
        translator = PostgresTranslator()
        assert translator.primary_column_definition(SchemaColumn(name="id", col_type="bigint", primary=True)) == \
            '"id" BIGSERIAL PRIMARY KEY'
        assert translator.column_type(SchemaColumn(name="x", col_type="json")) == "JSONB"
        assert translator.column_type(SchemaColumn(name="x", col_type="float")) == "DOUBLE PRECISION"


class TestMysqlTranslator:

    def test_quoting_and_primary_key(self):
        translator = MysqlTranslator()
        assert translator.primary_column_definition(SchemaColumn(name="id", col_type="integer", primary=True)) == \
            "`id` INTEGER NOT NULL AUTO_INCREMENT PRIMARY KEY"
        assert translator.drop_table(SchemaTable(name="t")) == "DROP TABLE `t`;"

    def test_engine_specific_statements(self):
        translator = MysqlTranslator()
        assert translator.change_column(column_table("age", "integer", null=True)) == \
            "ALTER TABLE `users` MODIFY `age` INTEGER;"
        table = SchemaTable(name="users").index("email").index("email", name="by_email")
        assert translator.drop_index(table) == "DROP INDEX `users_email_idx` ON `users`;"
        assert translator.rename_index(table) == \
            "ALTER TABLE `users` RENAME INDEX `users_email_idx` TO `by_email`;"
