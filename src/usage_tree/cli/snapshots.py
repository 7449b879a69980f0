"""Snapshot commands: list stored snapshots, delete one."""

import json
from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from ..exceptions import UsageTreeError
from . import app
from ._common import console, format_millis, open_store


@app.command()
def snapshots(
    ctx: typer.Context,
    customer_id: Optional[int] = typer.Option(
        None, "--customer-id", help="Only list this customer's snapshots"
    ),
    limit: int = typer.Option(
        20,
        "--limit",
        "-n",
        help="Maximum number of snapshots to list",
        min=1,
        max=1000,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    List stored snapshots, newest first.

    [bold cyan]Examples:[/bold cyan]

      usage-tree snapshots

      usage-tree snapshots --customer-id 3 --json
    """
    with open_store(ctx) as store:
        rows = store.list_snapshots(customer_id=customer_id, limit=limit)

    if json_output:
        print(json.dumps(rows, indent=2))
        return

    if not rows:
        console.print("[yellow]No snapshots recorded yet.[/yellow]")
        return

    table = Table(title="Snapshots", show_lines=False, pad_edge=True)
    table.add_column("ID", style="bold", justify="right")
    table.add_column("Customer", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Packages")
    table.add_column("Used since (UTC)")
    table.add_column("Nodes", justify="right", style="yellow")
    table.add_column("Created", style="green")

    for s in rows:
        created = s["created_at"].replace("T", " ")
        if "." in created:
            created = created[: created.index(".")]
        table.add_row(
            str(s["id"]),
            str(s["customer_id"]),
            escape(s["name"]) or "-",
            escape(s["packages"]) or "*",
            format_millis(s["filter_invoked_at_millis"]) if s["filter_invoked_at_millis"] > 0 else "-",
            str(s["node_count"]),
            created,
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def delete(
    ctx: typer.Context,
    snapshot_id: int = typer.Argument(..., help="Snapshot to delete"),
    nodes_only: bool = typer.Option(
        False, "--nodes-only", help="Delete the stored tree but keep the snapshot definition"
    ),
):
    """Delete a snapshot (or only its stored tree)."""
    try:
        with open_store(ctx) as store:
            if nodes_only:
                snapshot = store.load_snapshot(snapshot_id)
                assert snapshot.customer_id is not None
                store.delete_by_snapshot(snapshot.customer_id, snapshot_id)
                console.print(f"[green]Deleted tree of snapshot {snapshot_id}[/green]")
                return
            if not store.delete_snapshot(snapshot_id):
                console.print(f"[yellow]No snapshot with id={snapshot_id}[/yellow]")
                raise typer.Exit(1)
    except UsageTreeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]Deleted snapshot {snapshot_id}[/green]")
