"""SQL dialect capabilities and DDL rendering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ._schema import Column, ForeignKeyConstraint, Sequence, Table


class UnknownPlatformError(ValueError):
    """No platform preset is registered under the requested name."""


@dataclass(frozen=True, slots=True)
class SqlPlatform:
    """A SQL dialect: what it supports and how its DDL is spelled.

    Attributes:
        name: Preset name of the dialect.
        supports_schemas: Whether ``CREATE SCHEMA`` is available.
        supports_sequences: Whether sequences are available.
        supports_foreign_key_constraints: Whether foreign keys are enforced at all.
        supports_create_drop_foreign_key_constraints: Whether foreign keys can be
            added and dropped with ``ALTER TABLE``. If not, they are inlined into
            ``CREATE TABLE``.
        supports_deferrable_constraints: Whether ``DEFERRABLE`` is understood.
        drop_foreign_key_keyword: Keyword following ``ALTER TABLE ... DROP``.

    """

    name: str
    supports_schemas: bool = True
    supports_sequences: bool = True
    supports_foreign_key_constraints: bool = True
    supports_create_drop_foreign_key_constraints: bool = True
    supports_deferrable_constraints: bool = True
    drop_foreign_key_keyword: str = "CONSTRAINT"

    def create_schema_sql(self, namespace: str) -> str:
        return f"CREATE SCHEMA {namespace}"

    def create_table_sql(self, table: Table, *, include_foreign_keys: bool = False) -> list[str]:
        """Render ``CREATE TABLE`` followed by the table's ``CREATE INDEX`` statements.

        Args:
            table: The table to create.
            include_foreign_keys: Inline the foreign key constraints into the
                table definition. Ignored if the platform has no foreign keys.

        Returns:
            The statements, table first.

        """
        definitions = [self.column_sql(column) for column in table.columns]
        if table.primary_key:
            definitions.append(f"PRIMARY KEY ({', '.join(table.primary_key)})")
        if include_foreign_keys and self.supports_foreign_key_constraints:
            definitions.extend(self.foreign_key_sql(fk, table.name) for fk in table.foreign_keys)

        sql = [f"CREATE TABLE {table.name} ({', '.join(definitions)})"]
        for index in table.indexes:
            unique = "UNIQUE " if index.unique else ""
            sql.append(f"CREATE {unique}INDEX {index.name} ON {table.name} ({', '.join(index.columns)})")
        return sql

    def column_sql(self, column: Column) -> str:
        sql = f"{column.name} {column.type.upper()}"
        if column.default is not None:
            sql += f" DEFAULT {_literal(column.default)}"
        if not column.nullable:
            sql += " NOT NULL"
        return sql

    def foreign_key_sql(self, foreign_key: ForeignKeyConstraint, table_name: str) -> str:
        """Render a foreign key as a table constraint clause."""
        sql = (
            f"CONSTRAINT {foreign_key.constraint_name(table_name)}"
            f" FOREIGN KEY ({', '.join(foreign_key.local_columns)})"
            f" REFERENCES {foreign_key.foreign_table} ({', '.join(foreign_key.foreign_columns)})"
        )
        if foreign_key.on_delete is not None:
            sql += f" ON DELETE {foreign_key.on_delete.upper()}"
        if foreign_key.on_update is not None:
            sql += f" ON UPDATE {foreign_key.on_update.upper()}"
        if self.supports_deferrable_constraints:
            if foreign_key.deferrable:
                sql += " DEFERRABLE INITIALLY DEFERRED"
            else:
                sql += " NOT DEFERRABLE INITIALLY IMMEDIATE"
        return sql

    def create_foreign_key_sql(self, foreign_key: ForeignKeyConstraint, table_name: str) -> str:
        return f"ALTER TABLE {table_name} ADD {self.foreign_key_sql(foreign_key, table_name)}"

    def drop_foreign_key_sql(self, foreign_key: ForeignKeyConstraint, table_name: str) -> str:
        name = foreign_key.constraint_name(table_name)
        return f"ALTER TABLE {table_name} DROP {self.drop_foreign_key_keyword} {name}"

    def create_sequence_sql(self, sequence: Sequence) -> str:
        return (
            f"CREATE SEQUENCE {sequence.name} INCREMENT BY {sequence.allocation_size}"
            f" MINVALUE {sequence.initial_value} START {sequence.initial_value}"
        )

    def alter_sequence_sql(self, sequence: Sequence) -> str:
        return f"ALTER SEQUENCE {sequence.name} INCREMENT BY {sequence.allocation_size}"

    def drop_sequence_sql(self, sequence: Sequence) -> str:
        return f"DROP SEQUENCE {sequence.name}"

    def drop_table_sql(self, table: Table) -> str:
        return f"DROP TABLE {table.name}"


def _literal(value: str | float | bool) -> str:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, str):
        escaped = value.replace("'", "''")
        return f"'{escaped}'"
    return str(value)


PLATFORMS: dict[str, SqlPlatform] = {
    "generic": SqlPlatform(name="generic"),
    "postgresql": SqlPlatform(name="postgresql"),
    "mysql": SqlPlatform(
        name="mysql",
        supports_schemas=False,
        supports_sequences=False,
        supports_deferrable_constraints=False,
        drop_foreign_key_keyword="FOREIGN KEY",
    ),
    "sqlite": SqlPlatform(
        name="sqlite",
        supports_schemas=False,
        supports_sequences=False,
        supports_create_drop_foreign_key_constraints=False,
    ),
}


def get_platform(name: str) -> SqlPlatform:
    """Look up a platform preset by name (case-insensitive).

    Raises:
        UnknownPlatformError: If no preset has that name.

    """
    try:
        return PLATFORMS[name.lower()]
    except KeyError:
        available = ", ".join(sorted(PLATFORMS))
        msg = f"Unknown platform '{name}'. Available platforms: {available}"
        raise UnknownPlatformError(msg) from None
