"""Schema objects that take part in DDL emission."""

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Column(BaseModel):
    """A table column."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    nullable: bool = False
    default: str | int | float | bool | None = None


class Index(BaseModel):
    """A secondary index on a table."""

    model_config = ConfigDict(frozen=True)

    name: str
    columns: list[str] = Field(min_length=1)
    unique: bool = False


class ForeignKeyConstraint(BaseModel):
    """A foreign key from ``local_columns`` to ``foreign_columns`` of ``foreign_table``.

    Attributes:
        name: Constraint name. Generated from the local table and columns if omitted.
        local_table: Owning table. Only needed for orphaned foreign keys, which
            are not listed under a table.
        deferrable: Whether the constraint check is deferred to commit time.

    """

    model_config = ConfigDict(frozen=True)

    local_columns: list[str] = Field(min_length=1)
    foreign_table: str
    foreign_columns: list[str] = Field(min_length=1)
    name: str | None = None
    local_table: str | None = None
    on_delete: str | None = None
    on_update: str | None = None
    deferrable: bool = False

    @model_validator(mode="after")
    def _check_column_counts(self) -> Self:
        if len(self.local_columns) != len(self.foreign_columns):
            msg = (
                f"Foreign key to '{self.foreign_table}' has {len(self.local_columns)} local column(s)"
                f" but {len(self.foreign_columns)} foreign column(s)"
            )
            raise ValueError(msg)
        return self

    def constraint_name(self, table_name: str) -> str:
        """Return the constraint name, generating one for unnamed constraints."""
        if self.name is not None:
            return self.name
        return "fk_" + "_".join([table_name, *self.local_columns])


class Table(BaseModel):
    """A table definition.

    Example:
        >>> Table(
        ...     name="child",
        ...     columns=[Column(name="id", type="integer"), Column(name="parent_id", type="integer")],
        ...     primary_key=["id"],
        ...     foreign_keys=[
        ...         ForeignKeyConstraint(local_columns=["parent_id"], foreign_table="parent", foreign_columns=["id"]),
        ...     ],
        ... )

    """

    model_config = ConfigDict(frozen=True)

    name: str
    columns: list[Column] = Field(default_factory=list)
    primary_key: list[str] = Field(default_factory=list)
    indexes: list[Index] = Field(default_factory=list)
    foreign_keys: list[ForeignKeyConstraint] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_column_references(self) -> Self:
        known = {column.name for column in self.columns}
        if len(known) != len(self.columns):
            msg = f"Table '{self.name}' has duplicate column names"
            raise ValueError(msg)

        referenced = [
            *self.primary_key,
            *(name for index in self.indexes for name in index.columns),
            *(name for fk in self.foreign_keys for name in fk.local_columns),
        ]
        missing = [name for name in referenced if name not in known]
        if missing:
            msg = f"Table '{self.name}' references unknown column(s): {', '.join(sorted(set(missing)))}"
            raise ValueError(msg)
        return self

    def get_column(self, name: str) -> Column:
        """Get a column by name.

        Raises:
            KeyError: If the table has no such column.

        """
        for column in self.columns:
            if column.name == name:
                return column
        msg = f"Table '{self.name}' has no column '{name}'"
        raise KeyError(msg)

    def is_soft_reference(self, foreign_key: ForeignKeyConstraint) -> bool:
        """Check whether a foreign key of this table may be broken in a cycle.

        A reference is soft when the constraint is deferrable or when every local
        column is nullable, so a row can be inserted before its target exists.
        """
        if foreign_key.deferrable:
            return True
        return all(self.get_column(name).nullable for name in foreign_key.local_columns)


class Sequence(BaseModel):
    """A database sequence."""

    model_config = ConfigDict(frozen=True)

    name: str
    allocation_size: int = Field(default=1, ge=1)
    initial_value: int = 1
