"""Tests for SQL platforms."""

import pytest

from schemaorder import (
    Column,
    ForeignKeyConstraint,
    Index,
    Sequence,
    SqlPlatform,
    Table,
    UnknownPlatformError,
    get_platform,
)


class TestGetPlatform:
    @pytest.mark.parametrize("name", ["generic", "postgresql", "mysql", "sqlite", "SQLite"])
    def test_known_presets(self, name: str) -> None:
        assert get_platform(name).name == name.lower()

    def test_unknown_preset(self) -> None:
        with pytest.raises(UnknownPlatformError, match="Available platforms: generic, mysql, postgresql, sqlite"):
            get_platform("oracle")

    def test_unknown_platform_error_is_value_error(self) -> None:
        assert issubclass(UnknownPlatformError, ValueError)


class TestColumnSql:
    @pytest.mark.parametrize(
        ("column", "expected"),
        [
            (Column(name="id", type="integer"), "id INTEGER NOT NULL"),
            (Column(name="note", type="text", nullable=True), "note TEXT"),
            (Column(name="n", type="int", default=0), "n INT DEFAULT 0 NOT NULL"),
            (Column(name="flag", type="boolean", default=True), "flag BOOLEAN DEFAULT TRUE NOT NULL"),
            (Column(name="s", type="varchar(10)", default="it's"), "s VARCHAR(10) DEFAULT 'it''s' NOT NULL"),
        ],
    )
    def test_column_sql(self, column: Column, expected: str) -> None:
        assert get_platform("generic").column_sql(column) == expected


class TestCreateTableSql:
    @pytest.fixture
    def table(self) -> Table:
        return Table(
            name="child",
            columns=[Column(name="id", type="integer"), Column(name="parent_id", type="integer", nullable=True)],
            primary_key=["id"],
            indexes=[Index(name="uniq_parent", columns=["parent_id"], unique=True)],
            foreign_keys=[
                ForeignKeyConstraint(
                    local_columns=["parent_id"],
                    foreign_table="parent",
                    foreign_columns=["id"],
                    on_delete="cascade",
                    deferrable=True,
                ),
            ],
        )

    def test_without_foreign_keys(self, table: Table) -> None:
        sql = get_platform("postgresql").create_table_sql(table)

        assert sql == [
            "CREATE TABLE child (id INTEGER NOT NULL, parent_id INTEGER, PRIMARY KEY (id))",
            "CREATE UNIQUE INDEX uniq_parent ON child (parent_id)",
        ]

    def test_with_inline_foreign_keys(self, table: Table) -> None:
        sql = get_platform("sqlite").create_table_sql(table, include_foreign_keys=True)

        assert sql[0] == (
            "CREATE TABLE child (id INTEGER NOT NULL, parent_id INTEGER, PRIMARY KEY (id),"
            " CONSTRAINT fk_child_parent_id FOREIGN KEY (parent_id) REFERENCES parent (id)"
            " ON DELETE CASCADE DEFERRABLE INITIALLY DEFERRED)"
        )

    def test_platform_without_foreign_keys_ignores_inline_request(self, table: Table) -> None:
        platform = SqlPlatform(name="nofk", supports_foreign_key_constraints=False)

        sql = platform.create_table_sql(table, include_foreign_keys=True)

        assert "CONSTRAINT" not in sql[0]

    def test_mysql_has_no_deferrable_clause(self, table: Table) -> None:
        sql = get_platform("mysql").create_foreign_key_sql(table.foreign_keys[0], table.name)

        assert sql == (
            "ALTER TABLE child ADD CONSTRAINT fk_child_parent_id FOREIGN KEY (parent_id)"
            " REFERENCES parent (id) ON DELETE CASCADE"
        )


class TestDropSql:
    def test_drop_foreign_key(self) -> None:
        fk = ForeignKeyConstraint(name="fk_x", local_columns=["a"], foreign_table="t", foreign_columns=["id"])

        assert get_platform("postgresql").drop_foreign_key_sql(fk, "child") == "ALTER TABLE child DROP CONSTRAINT fk_x"
        assert get_platform("mysql").drop_foreign_key_sql(fk, "child") == "ALTER TABLE child DROP FOREIGN KEY fk_x"

    def test_drop_table_and_sequence(self) -> None:
        platform = get_platform("generic")

        assert platform.drop_table_sql(Table(name="t")) == "DROP TABLE t"
        assert platform.drop_sequence_sql(Sequence(name="s")) == "DROP SEQUENCE s"


class TestSequenceSql:
    def test_create_sequence(self) -> None:
        sequence = Sequence(name="seq", allocation_size=10, initial_value=100)

        assert get_platform("postgresql").create_sequence_sql(sequence) == (
            "CREATE SEQUENCE seq INCREMENT BY 10 MINVALUE 100 START 100"
        )

    def test_alter_sequence(self) -> None:
        sequence = Sequence(name="seq", allocation_size=10)

        assert get_platform("postgresql").alter_sequence_sql(sequence) == "ALTER SEQUENCE seq INCREMENT BY 10"
