"""SQLite-backed tree database stored in .usage-tree/ under the working directory."""

import sqlite3
from pathlib import Path
from typing import Optional, Union

from ..logging_config import get_logger

logger = get_logger(__name__)

# Current schema version (bump when tables change).
_SCHEMA_VERSION = 1

DB_FILENAME = "tree.db"


class TreeDB:
    """Manages the ``tree.db`` SQLite database.

    Usage::

        with TreeDB(".usage-tree") as db:
            snapshot = create_snapshot(db.conn, descriptor)
    """

    def __init__(self, db_dir: Union[str, Path]) -> None:
        self.db_dir: Path = Path(db_dir)
        self.db_path: Path = self.db_dir / DB_FILENAME
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def conn(self) -> sqlite3.Connection:
        """Return the active connection. Raises if not connected."""
        if self._conn is None:
            raise RuntimeError("TreeDB is not connected. Use as context manager or call connect().")
        return self._conn

    @property
    def connected(self) -> bool:
        return self._conn is not None

    # ── lifecycle ─────────────────────────────────────────────────

    def _ensure_dir(self) -> None:
        """Create the database directory with a .gitignore so it stays untracked."""
        self.db_dir.mkdir(parents=True, exist_ok=True)
        gitignore = self.db_dir / ".gitignore"
        if not gitignore.exists():
            gitignore.write_text("*\n")

    def connect(self) -> sqlite3.Connection:
        """Open (or create) the database and run migrations."""
        self._ensure_dir()
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        conn.row_factory = sqlite3.Row
        self._conn = conn
        self._migrate()
        logger.debug("Tree DB connected at %s", self.db_path)
        return conn

    def close(self) -> None:
        """Close the connection if open."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "TreeDB":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ── migration ─────────────────────────────────────────────────

    def _migrate(self) -> None:
        """Idempotently create / upgrade all tables."""
        c = self.conn

        c.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER NOT NULL
            )
            """
        )

        row = c.execute("SELECT version FROM schema_version").fetchone()
        if row is None:
            c.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (_SCHEMA_VERSION,),
            )

        # ── snapshots ────────────────────────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS snapshots (
                id                       INTEGER PRIMARY KEY AUTOINCREMENT,
                customer_id              INTEGER NOT NULL,
                name                     TEXT    NOT NULL DEFAULT '',
                packages                 TEXT    NOT NULL DEFAULT '',
                filter_invoked_at_millis INTEGER NOT NULL DEFAULT 0,
                created_at               TEXT    NOT NULL
            )
            """
        )

        # ── snapshot_nodes ───────────────────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS snapshot_nodes (
                id                     INTEGER PRIMARY KEY AUTOINCREMENT,
                snapshot_id            INTEGER NOT NULL REFERENCES snapshots(id) ON DELETE CASCADE,
                customer_id            INTEGER NOT NULL,
                signature              TEXT    NOT NULL,
                parent                 TEXT    NOT NULL DEFAULT '',
                type                   TEXT    NOT NULL,
                used_count             INTEGER NOT NULL DEFAULT 0,
                unused_count           INTEGER NOT NULL DEFAULT 0,
                last_invoked_at_millis INTEGER
            )
            """
        )

        # ── indexes ──────────────────────────────────────────────
        c.execute("CREATE INDEX IF NOT EXISTS idx_snapshots_customer ON snapshots(customer_id)")
        c.execute(
            "CREATE INDEX IF NOT EXISTS idx_snapshot_nodes_parent "
            "ON snapshot_nodes(customer_id, snapshot_id, parent)"
        )
        c.execute(
            "CREATE INDEX IF NOT EXISTS idx_snapshot_nodes_signature "
            "ON snapshot_nodes(customer_id, snapshot_id, signature)"
        )

        c.commit()
