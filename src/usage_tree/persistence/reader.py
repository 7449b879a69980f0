"""Read snapshots and snapshot nodes back from the tree database."""

import sqlite3
from typing import Any, Optional

from ..exceptions import SnapshotNotFoundError
from ..models import NodeType, PersistedNode, SnapshotDescriptor

_NODE_COLUMNS = (
    "id, snapshot_id, customer_id, signature, parent, type, "
    "used_count, unused_count, last_invoked_at_millis"
)


def _row_to_node(row: sqlite3.Row) -> PersistedNode:
    return PersistedNode(
        id=row["id"],
        snapshot_id=row["snapshot_id"],
        customer_id=row["customer_id"],
        signature=row["signature"],
        parent_signature=row["parent"],
        type=NodeType(row["type"]),
        used_count=row["used_count"],
        unused_count=row["unused_count"],
        last_invoked_at_millis=row["last_invoked_at_millis"],
    )


def _row_to_snapshot(row: sqlite3.Row) -> SnapshotDescriptor:
    return SnapshotDescriptor(
        id=row["id"],
        customer_id=row["customer_id"],
        name=row["name"],
        packages=row["packages"],
        filter_invoked_at_millis=row["filter_invoked_at_millis"],
        created_at=row["created_at"],
    )


def load_snapshot(conn: sqlite3.Connection, snapshot_id: int) -> SnapshotDescriptor:
    """Load one snapshot row.

    Raises
    ------
    SnapshotNotFoundError
        If no snapshot with the given id exists.
    """
    row = conn.execute("SELECT * FROM snapshots WHERE id = ?", (snapshot_id,)).fetchone()
    if row is None:
        raise SnapshotNotFoundError(snapshot_id)
    return _row_to_snapshot(row)


def list_snapshots(
    conn: sqlite3.Connection, customer_id: Optional[int] = None, limit: int = 20
) -> list[dict[str, Any]]:
    """Return lightweight summaries of recent snapshots, newest first.

    Each dict has keys: id, customer_id, name, packages,
    filter_invoked_at_millis, created_at, node_count.
    """
    where = ""
    params: list[Any] = []
    if customer_id is not None:
        where = "WHERE s.customer_id = ?"
        params.append(customer_id)
    params.append(limit)

    rows = conn.execute(
        f"""
        SELECT s.id, s.customer_id, s.name, s.packages,
               s.filter_invoked_at_millis, s.created_at,
               (SELECT COUNT(*) FROM snapshot_nodes n WHERE n.snapshot_id = s.id) AS node_count
        FROM snapshots s
        {where}
        ORDER BY s.id DESC
        LIMIT ?
        """,
        params,
    ).fetchall()
    return [dict(r) for r in rows]


def find_children(
    conn: sqlite3.Connection, customer_id: int, snapshot_id: int, parent_signature: str
) -> list[PersistedNode]:
    """Nodes whose stored parent is exactly ``parent_signature``."""
    rows = conn.execute(
        f"""
        SELECT {_NODE_COLUMNS} FROM snapshot_nodes
        WHERE customer_id = ? AND snapshot_id = ? AND parent = ?
        ORDER BY signature
        """,
        (customer_id, snapshot_id, parent_signature),
    ).fetchall()
    return [_row_to_node(r) for r in rows]


def find_by_signature_substring(
    conn: sqlite3.Connection,
    customer_id: int,
    snapshot_id: int,
    substring: str,
    exclude_id: Optional[int] = None,
) -> list[PersistedNode]:
    """Nodes whose signature contains ``substring`` (case-sensitive, no wildcards)."""
    sql = f"""
        SELECT {_NODE_COLUMNS} FROM snapshot_nodes
        WHERE customer_id = ? AND snapshot_id = ? AND instr(signature, ?) > 0
    """
    params: list[Any] = [customer_id, snapshot_id, substring]
    if exclude_id is not None:
        sql += " AND id != ?"
        params.append(exclude_id)
    sql += " ORDER BY signature"

    rows = conn.execute(sql, params).fetchall()
    return [_row_to_node(r) for r in rows]
