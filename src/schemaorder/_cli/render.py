"""Rich rendering utilities for the CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table as RichTable

if TYPE_CHECKING:
    from rich.console import Console

    from schemaorder._schema import Table
    from schemaorder._schema_diff import SchemaDiff


def render_order_table(tables: list[Table], console: Console) -> None:
    """Render a commit order as a Rich table.

    Args:
        tables: Tables in commit order.
        console: Rich Console to output to.

    """
    if not tables:
        console.print("[dim]No new tables[/dim]")
        return

    positions = {table.name: position for position, table in enumerate(tables, start=1)}

    table = RichTable(show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Table", style="bold")
    table.add_column("References")

    for position, new_table in enumerate(tables, start=1):
        references = []
        for foreign_key in new_table.foreign_keys:
            target = escape(foreign_key.foreign_table)
            if foreign_key.foreign_table not in positions:
                references.append(f"[dim]{target} (existing)[/dim]")
            elif positions[foreign_key.foreign_table] > position:
                # Only possible when a cycle was broken on this reference
                references.append(f"[yellow]{target} (deferred)[/yellow]")
            else:
                references.append(target)
        table.add_row(str(position), escape(new_table.name), ", ".join(references))

    console.print(table)


def render_diff_summary(schema_diff: SchemaDiff, console: Console) -> None:
    """Render the object counts of a schema diff as a panel.

    Args:
        schema_diff: The diff to summarize.
        console: Rich Console to output to.

    """
    table = RichTable(show_header=True, header_style="bold cyan")
    table.add_column("Object", style="bold")
    table.add_column("New", justify="right", style="green")
    table.add_column("Changed", justify="right", style="yellow")
    table.add_column("Removed", justify="right", style="red")

    table.add_row("Namespaces", str(len(schema_diff.new_namespaces)), "-", "-")
    table.add_row("Tables", str(len(schema_diff.new_tables)), "-", str(len(schema_diff.removed_tables)))
    table.add_row(
        "Sequences",
        str(len(schema_diff.new_sequences)),
        str(len(schema_diff.changed_sequences)),
        str(len(schema_diff.removed_sequences)),
    )
    table.add_row("Orphaned foreign keys", "-", "-", str(len(schema_diff.orphaned_foreign_keys)))

    console.print(Panel(table, title="[bold]Schema Diff[/bold]", border_style="cyan"))
