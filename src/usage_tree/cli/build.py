"""Build commands: create a snapshot tree from a record file, or recompute one."""

from pathlib import Path
from typing import Optional

import typer

from ..exceptions import UsageTreeError
from ..ingest import load_records
from ..models import SnapshotDescriptor
from ..service import BuildResult, SnapshotNodeService
from . import app
from ._common import console, get_config, open_store, resolve_customer

_RECORDS_ARGUMENT = typer.Argument(
    ...,
    help="Invocation records (.json, .jsonl or .csv)",
    exists=True,
    file_okay=True,
    dir_okay=False,
    readable=True,
)


@app.command()
def build(
    ctx: typer.Context,
    records_file: Path = _RECORDS_ARGUMENT,
    customer_id: Optional[int] = typer.Option(
        None, "--customer-id", help="Customer owning the snapshot (default from config)"
    ),
    packages: str = typer.Option(
        "", "--packages", "-p", help="Comma-separated package globs, e.g. 'com.foo.*,org.**.api'"
    ),
    since: int = typer.Option(
        0, "--since", help="Count invocations at or after this epoch-millis time as used"
    ),
    name: str = typer.Option("", "--name", help="Snapshot name"),
):
    """
    Create a snapshot and store its usage tree.

    [bold cyan]Examples:[/bold cyan]

      usage-tree build invocations.jsonl

      usage-tree build export.csv --packages "com.example.**" --since 1700000000000
    """
    config = get_config(ctx)
    try:
        records = load_records(records_file)
        with open_store(ctx) as store:
            service = SnapshotNodeService(store, config)
            # A bad filter or record rolls the new snapshot row back too.
            with store.transaction():
                snapshot = store.create_snapshot(
                    SnapshotDescriptor(
                        customer_id=resolve_customer(ctx, customer_id),
                        packages=packages,
                        filter_invoked_at_millis=since,
                        name=name or records_file.stem,
                    )
                )
                result = service.create_and_save_snapshot_nodes(snapshot, records)
    except UsageTreeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    _print_result(result, "Created")


@app.command()
def recompute(
    ctx: typer.Context,
    snapshot_id: int = typer.Argument(..., help="Snapshot to rebuild"),
    records_file: Path = _RECORDS_ARGUMENT,
):
    """Replace a snapshot's stored tree with one built from a new record file."""
    config = get_config(ctx)
    try:
        records = load_records(records_file)
        with open_store(ctx) as store:
            snapshot = store.load_snapshot(snapshot_id)
            result = SnapshotNodeService(store, config).recompute_snapshot_nodes(snapshot, records)
    except UsageTreeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    _print_result(result, "Recomputed")


def _print_result(result: BuildResult, verb: str) -> None:
    console.print(
        f"[green]{verb} snapshot {result.snapshot_id}[/green]: "
        f"{result.records_kept}/{result.records_in} record(s) kept, "
        f"{result.nodes_built} node(s) built, "
        f"{result.rows_written} row(s) stored in {result.chunks_written} chunk(s)"
    )
