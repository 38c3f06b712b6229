"""Schema diff: the set of changes to apply and the DDL that applies them."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Self, cast

from pydantic import BaseModel, Field, model_validator

from ._graph import CommitOrderCalculator
from ._schema import ForeignKeyConstraint, Sequence, Table

if TYPE_CHECKING:
    from ._platform import SqlPlatform

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DependencyWeights:
    """Edge weights given to foreign keys when ordering new tables.

    Attributes:
        hard: Weight of a mandatory reference.
        soft: Weight of a reference that can be satisfied later (deferrable
            constraint or all-nullable local columns). In a cycle between a hard
            and a soft reference the soft one is broken.

    """

    hard: int = 1
    soft: int = 0


class SchemaDiff(BaseModel):
    """Changes to bring a database schema up to date.

    Only additions and removals are modelled: a diff is authored or produced
    elsewhere and handed over as data.
    """

    new_namespaces: list[str] = Field(default_factory=list)
    new_tables: list[Table] = Field(default_factory=list)
    removed_tables: list[Table] = Field(default_factory=list)
    new_sequences: list[Sequence] = Field(default_factory=list)
    changed_sequences: list[Sequence] = Field(default_factory=list)
    removed_sequences: list[Sequence] = Field(default_factory=list)
    orphaned_foreign_keys: list[ForeignKeyConstraint] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique_new_tables(self) -> Self:
        seen: set[str] = set()
        duplicates: set[str] = set()
        for table in self.new_tables:
            if table.name in seen:
                duplicates.add(table.name)
            seen.add(table.name)
        if duplicates:
            msg = f"Duplicate new table name(s): {', '.join(sorted(duplicates))}"
            raise ValueError(msg)
        return self

    @model_validator(mode="after")
    def _check_orphaned_foreign_keys(self) -> Self:
        for foreign_key in self.orphaned_foreign_keys:
            if foreign_key.local_table is None:
                msg = f"Orphaned foreign key to '{foreign_key.foreign_table}' has no local_table"
                raise ValueError(msg)
        return self

    def external_references(self) -> list[tuple[Table, ForeignKeyConstraint]]:
        """Foreign keys of new tables that point at tables outside the new batch.

        These do not take part in ordering: their target is expected to exist already.
        """
        new_names = {table.name for table in self.new_tables}
        return [
            (table, foreign_key)
            for table in self.new_tables
            for foreign_key in table.foreign_keys
            if foreign_key.foreign_table not in new_names
        ]

    def new_tables_sorted_by_dependencies(self, weights: DependencyWeights | None = None) -> list[Table]:
        """Sort new tables so that referenced tables are created first.

        Args:
            weights: Edge weights for hard and soft references. Defaults to
                ``DependencyWeights()``.

        Returns:
            The new tables in creation order.

        """
        if weights is None:
            weights = DependencyWeights()

        calculator = CommitOrderCalculator[Table]()
        for table in self.new_tables:
            calculator.add_node(table.name, table)

        # Several foreign keys between the same pair collapse into one edge.
        edges: dict[tuple[str, str], int] = {}
        for table in self.new_tables:
            for foreign_key in table.foreign_keys:
                if not calculator.has_node(foreign_key.foreign_table):
                    continue
                weight = weights.soft if table.is_soft_reference(foreign_key) else weights.hard
                pair = (foreign_key.foreign_table, table.name)
                edges[pair] = max(weight, edges.get(pair, weight))

        for (referenced, referencing), weight in edges.items():
            logger.debug("Table '%s' depends on '%s' (weight %d)", referencing, referenced, weight)
            calculator.add_dependency(referenced, referencing, weight)

        return calculator.sort()

    def to_sql(self, platform: SqlPlatform, weights: DependencyWeights | None = None) -> list[str]:
        """Return the statements applying the whole diff."""
        return self._to_sql(platform, weights, save_mode=False)

    def to_save_sql(self, platform: SqlPlatform, weights: DependencyWeights | None = None) -> list[str]:
        """Return the statements applying the diff without destroying anything.

        Save mode skips dropping tables, sequences and orphaned foreign keys, so
        that objects unknown to the schema definition survive.
        """
        return self._to_sql(platform, weights, save_mode=True)

    def _to_sql(self, platform: SqlPlatform, weights: DependencyWeights | None, *, save_mode: bool) -> list[str]:
        sql: list[str] = []

        if platform.supports_schemas:
            sql.extend(platform.create_schema_sql(namespace) for namespace in self.new_namespaces)

        # Constraints can be added and dropped after the fact
        alter_foreign_keys = (
            platform.supports_foreign_key_constraints and platform.supports_create_drop_foreign_key_constraints
        )

        if alter_foreign_keys and not save_mode:
            # local_table is checked by _check_orphaned_foreign_keys
            sql.extend(
                platform.drop_foreign_key_sql(foreign_key, cast("str", foreign_key.local_table))
                for foreign_key in self.orphaned_foreign_keys
            )

        if platform.supports_sequences:
            sql.extend(platform.alter_sequence_sql(sequence) for sequence in self.changed_sequences)
            if not save_mode:
                sql.extend(platform.drop_sequence_sql(sequence) for sequence in self.removed_sequences)
            sql.extend(platform.create_sequence_sql(sequence) for sequence in self.new_sequences)

        deferred_foreign_keys = alter_foreign_keys
        foreign_key_sql: list[str] = []
        for table in self.new_tables_sorted_by_dependencies(weights):
            sql.extend(platform.create_table_sql(table, include_foreign_keys=not deferred_foreign_keys))
            if deferred_foreign_keys:
                foreign_key_sql.extend(platform.create_foreign_key_sql(fk, table.name) for fk in table.foreign_keys)
        sql.extend(foreign_key_sql)

        if not save_mode:
            sql.extend(platform.drop_table_sql(table) for table in self.removed_tables)

        return sql
