"""Node storage contract and its SQLite implementation."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Iterator, Optional, Protocol, Sequence

from ..logging_config import get_logger
from ..models import PersistedNode, SnapshotDescriptor
from . import reader, writer

logger = get_logger(__name__)


class NodeStore(Protocol):
    """What the snapshot service needs from storage."""

    def save_nodes(self, batch: Sequence[PersistedNode]) -> None: ...

    def delete_by_snapshot(self, customer_id: int, snapshot_id: int) -> None: ...

    def find_children(
        self, customer_id: int, snapshot_id: int, parent_signature: str
    ) -> list[PersistedNode]: ...

    def find_by_signature_substring(
        self,
        customer_id: int,
        snapshot_id: int,
        substring: str,
        exclude_id: Optional[int] = None,
    ) -> list[PersistedNode]: ...

    def transaction(self): ...


class SqliteNodeStore:
    """``NodeStore`` over an open tree database connection.

    Writes commit immediately unless they run inside ``transaction()``, which
    groups them into one ``BEGIN IMMEDIATE`` transaction: concurrent writers
    of the same database wait instead of interleaving.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self._in_transaction = False

    @contextmanager
    def transaction(self) -> Iterator["SqliteNodeStore"]:
        if self._in_transaction:
            yield self
            return

        self.conn.execute("BEGIN IMMEDIATE")
        self._in_transaction = True
        try:
            yield self
        except Exception:
            self.conn.rollback()
            raise
        else:
            self.conn.commit()
        finally:
            self._in_transaction = False

    def _commit(self) -> None:
        if not self._in_transaction:
            self.conn.commit()

    def save_nodes(self, batch: Sequence[PersistedNode]) -> None:
        written = writer.insert_nodes(self.conn, batch)
        self._commit()
        logger.debug("Saved %d node row(s)", written)

    def delete_by_snapshot(self, customer_id: int, snapshot_id: int) -> None:
        removed = writer.delete_nodes(self.conn, customer_id, snapshot_id)
        self._commit()
        logger.debug("Deleted %d node row(s) of snapshot %d", removed, snapshot_id)

    def find_children(
        self, customer_id: int, snapshot_id: int, parent_signature: str
    ) -> list[PersistedNode]:
        return reader.find_children(self.conn, customer_id, snapshot_id, parent_signature)

    def find_by_signature_substring(
        self,
        customer_id: int,
        snapshot_id: int,
        substring: str,
        exclude_id: Optional[int] = None,
    ) -> list[PersistedNode]:
        return reader.find_by_signature_substring(
            self.conn, customer_id, snapshot_id, substring, exclude_id
        )

    # ── snapshot rows ─────────────────────────────────────────────

    def create_snapshot(self, snapshot: SnapshotDescriptor) -> SnapshotDescriptor:
        """Store a snapshot definition and return it with its new id."""
        stored = writer.insert_snapshot(self.conn, snapshot)
        self._commit()
        logger.info("Created snapshot %d for customer %d", stored.id, stored.customer_id)
        return stored

    def load_snapshot(self, snapshot_id: int) -> SnapshotDescriptor:
        return reader.load_snapshot(self.conn, snapshot_id)

    def list_snapshots(self, customer_id: Optional[int] = None, limit: int = 20) -> list[dict]:
        return reader.list_snapshots(self.conn, customer_id=customer_id, limit=limit)

    def delete_snapshot(self, snapshot_id: int) -> bool:
        """Delete a snapshot and all of its nodes. Returns False if it did not exist."""
        removed = writer.delete_snapshot_row(self.conn, snapshot_id)
        self._commit()
        return removed > 0
