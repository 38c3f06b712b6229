import logging
import tomllib
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from schemaorder._io import export_order_to_toml, load_schema_diff_from_toml, write_sql_script
from schemaorder._platform import UnknownPlatformError, get_platform
from schemaorder._schema_diff import DependencyWeights, SchemaDiff

from .config import ConfigError, SchemaOrderConfig, get_config
from .render import render_diff_summary, render_order_table

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Order new tables by their foreign keys and emit DDL."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _load_config() -> SchemaOrderConfig:
    try:
        return get_config()
    except ConfigError as e:
        err_console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


def _load_schema_diff(path: Path | None, config: SchemaOrderConfig) -> SchemaDiff:
    """Load the schema diff from the CLI path, falling back to config."""
    effective_path = path if path is not None else config.schema
    if effective_path is None:
        err_console.print(
            "[red]Error: Schema file required. Provide a path or configure [tool.schemaorder].schema[/red]",
        )
        raise typer.Exit(code=1)

    err_console.print(f"[cyan]Loading schema diff from:[/cyan] {effective_path}")
    try:
        return load_schema_diff_from_toml(effective_path)
    except FileNotFoundError as e:
        err_console.print(f"[red]Error: File not found: {effective_path}[/red]")
        raise typer.Exit(code=1) from e
    except tomllib.TOMLDecodeError as e:
        err_console.print(f"[red]Error: Invalid TOML in {effective_path}: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e
    except ValidationError as e:
        err_console.print(f"[red]Error: Invalid schema diff in {effective_path}[/red]")
        err_console.print(escape(str(e)))
        raise typer.Exit(code=1) from e


def _resolve_weights(config: SchemaOrderConfig, hard_weight: int | None, soft_weight: int | None) -> DependencyWeights:
    weights = DependencyWeights(
        hard=hard_weight if hard_weight is not None else config.weights.hard,
        soft=soft_weight if soft_weight is not None else config.weights.soft,
    )
    if weights.soft > weights.hard:
        err_console.print(
            f"[red]Error: Soft weight ({weights.soft}) must not exceed hard weight ({weights.hard})[/red]",
        )
        raise typer.Exit(code=1)
    return weights


SchemaArgument = Annotated[
    Path | None,
    typer.Argument(help="Path to the schema diff TOML file (defaults to [tool.schemaorder].schema)"),
]
HardWeightOption = Annotated[
    int | None,
    typer.Option("--hard-weight", help="Edge weight of mandatory foreign keys"),
]
SoftWeightOption = Annotated[
    int | None,
    typer.Option("--soft-weight", help="Edge weight of nullable or deferrable foreign keys"),
]


@app.command()
def order(
    path: SchemaArgument = None,
    *,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Path to output TOML file"),
    ] = None,
    hard_weight: HardWeightOption = None,
    soft_weight: SoftWeightOption = None,
) -> None:
    """Print the order in which the new tables have to be created."""
    err_console.print()
    config = _load_config()
    schema_diff = _load_schema_diff(path, config)
    weights = _resolve_weights(config, hard_weight, soft_weight)

    err_console.print("[cyan]Sorting new tables by dependencies...[/cyan]")
    tables = schema_diff.new_tables_sorted_by_dependencies(weights)
    err_console.print()

    render_order_table(tables, err_console)
    for table in tables:
        out_console.print(table.name, markup=False, highlight=False)

    if output is not None:
        err_console.print()
        err_console.print(f"[cyan]Exporting order to:[/cyan] {output}")
        export_order_to_toml(tables, output)

    err_console.print()
    err_console.print("[green]✓ Order complete[/green]")
    err_console.print()


@app.command()
def sql(
    path: SchemaArgument = None,
    *,
    platform_name: Annotated[
        str | None,
        typer.Option("--platform", help="SQL platform (generic, postgresql, mysql, sqlite)"),
    ] = None,
    save: Annotated[
        bool,
        typer.Option("--save", help="Never drop tables, sequences or foreign keys"),
    ] = False,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Path to output SQL file (defaults to [tool.schemaorder].output)"),
    ] = None,
    hard_weight: HardWeightOption = None,
    soft_weight: SoftWeightOption = None,
) -> None:
    """Emit the DDL applying a schema diff, new tables in dependency order."""
    err_console.print()
    config = _load_config()

    effective_platform = platform_name or config.platform or "generic"
    try:
        platform = get_platform(effective_platform)
    except UnknownPlatformError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    schema_diff = _load_schema_diff(path, config)
    weights = _resolve_weights(config, hard_weight, soft_weight)

    mode = "save mode" if save else "full mode"
    err_console.print(f"[cyan]Generating SQL for platform:[/cyan] [bold]{platform.name}[/bold] ({mode})")
    statements = schema_diff.to_save_sql(platform, weights) if save else schema_diff.to_sql(platform, weights)
    logger.debug("Generated %d statements", len(statements))

    effective_output = output if output is not None else config.output
    if effective_output is None:
        for statement in statements:
            out_console.print(f"{statement};", markup=False, highlight=False, soft_wrap=True)
    else:
        err_console.print(f"[cyan]Writing SQL to:[/cyan] {effective_output}")
        write_sql_script(statements, effective_output)

    err_console.print()
    err_console.print(f"[green]✓ {len(statements)} statement(s) generated[/green]")
    err_console.print()


@app.command()
def check(path: SchemaArgument = None) -> None:
    """Check the validity of a schema diff without generating SQL."""
    err_console.print()
    config = _load_config()
    schema_diff = _load_schema_diff(path, config)
    err_console.print()

    render_diff_summary(schema_diff, err_console)

    external = schema_diff.external_references()
    if external:
        err_console.print()
        err_console.print("[yellow]Foreign keys referencing tables outside the new batch (must already exist):[/yellow]")
        for table, foreign_key in external:
            err_console.print(f"  [yellow]•[/yellow] {escape(table.name)} → {escape(foreign_key.foreign_table)}")

    err_console.print()
    err_console.print("[green]✓ Schema diff is valid[/green]")
    err_console.print()


def main() -> None:
    app()
