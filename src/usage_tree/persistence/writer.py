"""Write snapshots and snapshot nodes into the tree database.

These functions never commit; callers decide the transaction boundary
(``SqliteNodeStore`` commits per call or per ``transaction()`` block).
"""

import sqlite3
from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable

from ..models import PersistedNode, SnapshotDescriptor


def insert_snapshot(conn: sqlite3.Connection, snapshot: SnapshotDescriptor) -> SnapshotDescriptor:
    """Insert a snapshot row and return the descriptor with its assigned id.

    ``customer_id`` must already be set; ``created_at`` defaults to now (UTC).
    """
    if snapshot.customer_id is None:
        raise ValueError("snapshot.customer_id is required to store a snapshot")

    created_at = snapshot.created_at or datetime.now(timezone.utc).isoformat()
    cur = conn.execute(
        """
        INSERT INTO snapshots (customer_id, name, packages, filter_invoked_at_millis, created_at)
        VALUES (?, ?, ?, ?, ?)
        """,
        (
            snapshot.customer_id,
            snapshot.name,
            snapshot.packages,
            snapshot.filter_invoked_at_millis,
            created_at,
        ),
    )
    snapshot_id = cur.lastrowid
    assert snapshot_id is not None
    return replace(snapshot, id=snapshot_id, created_at=created_at)


def delete_snapshot_row(conn: sqlite3.Connection, snapshot_id: int) -> int:
    """Delete a snapshot; its nodes go with it (ON DELETE CASCADE)."""
    cur = conn.execute("DELETE FROM snapshots WHERE id = ?", (snapshot_id,))
    return cur.rowcount


def insert_nodes(conn: sqlite3.Connection, nodes: Iterable[PersistedNode]) -> int:
    """Batch-insert node rows. Returns the number of rows written."""
    rows = [
        (
            n.snapshot_id,
            n.customer_id,
            n.signature,
            n.parent_signature,
            n.type.value,
            n.used_count,
            n.unused_count,
            n.last_invoked_at_millis,
        )
        for n in nodes
    ]
    if rows:
        conn.executemany(
            """
            INSERT INTO snapshot_nodes (
                snapshot_id, customer_id, signature, parent, type,
                used_count, unused_count, last_invoked_at_millis
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            rows,
        )
    return len(rows)


def delete_nodes(conn: sqlite3.Connection, customer_id: int, snapshot_id: int) -> int:
    """Remove every node row of one snapshot. Returns the number of rows removed."""
    cur = conn.execute(
        "DELETE FROM snapshot_nodes WHERE customer_id = ? AND snapshot_id = ?",
        (customer_id, snapshot_id),
    )
    return cur.rowcount
