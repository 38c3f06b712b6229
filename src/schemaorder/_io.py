from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

import tomli_w

from ._schema_diff import SchemaDiff

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ._schema import Table

logger = logging.getLogger(__name__)


def toml_to_schema_diff(toml_contents: dict[str, Any]) -> SchemaDiff:
    """Validate parsed TOML contents into a SchemaDiff.

    This is a pure function; see ``load_schema_diff_from_toml`` for file input.

    Raises:
        pydantic.ValidationError: If the contents do not describe a schema diff.

    """
    return SchemaDiff.model_validate(toml_contents)


def load_schema_diff_from_toml(input_path: Path | str) -> SchemaDiff:
    """Load a schema diff from a TOML file.

    Args:
        input_path: Path to the TOML file.

    Returns:
        The validated schema diff.

    """
    input_path = Path(input_path)

    with input_path.open("rb") as f:
        toml_contents = tomllib.load(f)

    schema_diff = toml_to_schema_diff(toml_contents)
    logger.debug(f"Loaded schema diff from {input_path} ({len(schema_diff.new_tables)} new tables)")
    return schema_diff


def export_order_to_toml(tables: Iterable[Table], output_path: Path | str) -> None:
    """Write a commit order as ``order = [...]`` to a TOML file.

    Args:
        tables: Tables in commit order.
        output_path: Destination file. Parent directories are created.

    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with output_path.open("wb") as f:
        tomli_w.dump({"order": [table.name for table in tables]}, f)

    logger.debug(f"Exported commit order to {output_path}")


def write_sql_script(statements: Iterable[str], output_path: Path | str) -> None:
    """Write statements to a file, one per line, each terminated by a semicolon."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text("".join(f"{statement};\n" for statement in statements))
    logger.debug(f"Wrote SQL script to {output_path}")
