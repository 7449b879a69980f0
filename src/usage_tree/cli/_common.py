"""Shared CLI helpers."""

import json
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional, Sequence

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import TreeConfig
from ..models import NodeType, PersistedNode
from ..persistence import SqliteNodeStore, TreeDB

console = Console()

_TYPE_STYLE = {
    NodeType.PACKAGE: "blue",
    NodeType.CLASS: "cyan",
    NodeType.METHOD: "green",
}


def get_config(ctx: typer.Context) -> TreeConfig:
    return ctx.obj["config"]


def resolve_customer(ctx: typer.Context, customer_id: Optional[int]) -> int:
    return customer_id if customer_id is not None else get_config(ctx).default_customer_id


@contextmanager
def open_store(ctx: typer.Context) -> Iterator[SqliteNodeStore]:
    """Open the configured tree database for the duration of a command."""
    with TreeDB(get_config(ctx).db_dir) as db:
        yield SqliteNodeStore(db.conn)


def format_millis(millis: Optional[int]) -> str:
    if millis is None:
        return "-"
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def nodes_to_json(nodes: Sequence[PersistedNode]) -> str:
    return json.dumps(
        [
            {
                "id": n.id,
                "snapshotId": n.snapshot_id,
                "customerId": n.customer_id,
                "signature": n.signature,
                "parent": n.parent_signature,
                "type": n.type.value,
                "usedCount": n.used_count,
                "unusedCount": n.unused_count,
                "lastInvokedAtMillis": n.last_invoked_at_millis,
            }
            for n in nodes
        ],
        indent=2,
    )


def print_nodes(nodes: Sequence[PersistedNode], title: str) -> None:
    """Human-readable Rich table of node rows."""
    table = Table(title=escape(title), show_lines=False, pad_edge=True)
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Type")
    table.add_column("Signature", style="bold")
    table.add_column("Used", justify="right", style="green")
    table.add_column("Unused", justify="right", style="yellow")
    table.add_column("Last invoked (UTC)")

    for n in nodes:
        style = _TYPE_STYLE.get(n.type, "")
        table.add_row(
            str(n.id) if n.id is not None else "-",
            f"[{style}]{n.type.value}[/{style}]" if style else n.type.value,
            escape(n.signature),
            str(n.used_count),
            str(n.unused_count),
            format_millis(n.last_invoked_at_millis),
        )

    console.print()
    console.print(table)
    console.print()
