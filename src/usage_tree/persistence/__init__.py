"""SQLite persistence for snapshots and their usage-tree nodes."""

from .database import TreeDB
from .store import NodeStore, SqliteNodeStore

__all__ = ["TreeDB", "NodeStore", "SqliteNodeStore"]
