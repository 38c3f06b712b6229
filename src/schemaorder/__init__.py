"""Dependency-respecting commit order for schema objects."""

__all__ = [
    "Column",
    "CommitOrderCalculator",
    "CommitOrderEdge",
    "CommitOrderNode",
    "DependencyWeights",
    "ForeignKeyConstraint",
    "Index",
    "NodeState",
    "SchemaDiff",
    "Sequence",
    "SqlPlatform",
    "Table",
    "UnknownNodeError",
    "UnknownPlatformError",
    "export_order_to_toml",
    "get_platform",
    "load_schema_diff_from_toml",
    "toml_to_schema_diff",
    "write_sql_script",
]

from ._graph import CommitOrderCalculator, CommitOrderEdge, CommitOrderNode, NodeState, UnknownNodeError
from ._io import export_order_to_toml, load_schema_diff_from_toml, toml_to_schema_diff, write_sql_script
from ._platform import SqlPlatform, UnknownPlatformError, get_platform
from ._schema import Column, ForeignKeyConstraint, Index, Sequence, Table
from ._schema_diff import DependencyWeights, SchemaDiff
