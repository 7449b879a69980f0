"""Browse commands: walk a stored tree by parent, or search it by signature."""

from typing import Optional

import typer

from ..exceptions import UsageTreeError
from ..service import SnapshotNodeService
from . import app
from ._common import console, get_config, nodes_to_json, open_store, print_nodes


@app.command()
def children(
    ctx: typer.Context,
    snapshot_id: int = typer.Argument(..., help="Snapshot to browse"),
    parent: str = typer.Option(
        "", "--parent", help="Parent signature (default: top level of the tree)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """
    Show the direct children of a node.

    [bold cyan]Examples:[/bold cyan]

      usage-tree children 1

      usage-tree children 1 --parent com.example.OrderService
    """
    try:
        with open_store(ctx) as store:
            snapshot = store.load_snapshot(snapshot_id)
            assert snapshot.customer_id is not None
            nodes = SnapshotNodeService(store, get_config(ctx)).read_children(
                snapshot.customer_id, snapshot_id, parent
            )
    except UsageTreeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if json_output:
        print(nodes_to_json(nodes))
        return
    if not nodes:
        console.print("[yellow]No children.[/yellow]")
        return
    print_nodes(nodes, title=parent or f"Snapshot {snapshot_id}")


@app.command()
def search(
    ctx: typer.Context,
    snapshot_id: int = typer.Argument(..., help="Snapshot to search"),
    substring: str = typer.Argument(..., help="Case-sensitive text to look for in signatures"),
    exclude_id: Optional[int] = typer.Option(None, "--exclude-id", help="Node id to leave out"),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """Find nodes whose signature contains SUBSTRING."""
    try:
        with open_store(ctx) as store:
            snapshot = store.load_snapshot(snapshot_id)
            assert snapshot.customer_id is not None
            nodes = SnapshotNodeService(store, get_config(ctx)).search_by_signature_substring(
                snapshot.customer_id, snapshot_id, substring, exclude_id
            )
    except UsageTreeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if json_output:
        print(nodes_to_json(nodes))
        return
    if not nodes:
        console.print(f"[yellow]No signatures containing {substring!r}.[/yellow]")
        return
    print_nodes(nodes, title=f"Signatures containing {substring!r}")
