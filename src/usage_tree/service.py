"""Snapshot node service: build a snapshot's usage tree and store or query it.

    filter records -> build trie -> flatten (fold package chains) -> save in chunks

The tree is built in memory by a single call and thrown away once flattened.
Storage errors propagate unchanged; nothing is retried here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .config import DEFAULT_CONFIG, TreeConfig
from .logging_config import get_logger
from .models import InvocationRecord, PersistedNode, SnapshotDescriptor
from .persistence.store import NodeStore
from .tree.builder import build_tree, tree_stats
from .tree.compressor import chunked, flatten_tree
from .tree.filtering import filter_records

logger = get_logger(__name__)


@dataclass(frozen=True)
class BuildResult:
    """Summary of one snapshot tree build."""

    snapshot_id: int
    records_in: int
    records_kept: int
    nodes_built: int
    rows_written: int
    chunks_written: int


class SnapshotNodeService:
    """Builds, stores and reads the usage tree of snapshots."""

    def __init__(self, store: NodeStore, config: TreeConfig = DEFAULT_CONFIG) -> None:
        self.store = store
        self.config = config

    # ── build ─────────────────────────────────────────────────────

    def build_nodes(
        self, snapshot: SnapshotDescriptor, records: Sequence[InvocationRecord]
    ) -> tuple[list[PersistedNode], int, int]:
        """Filter, build and flatten without touching storage.

        Returns the rows, the number of records kept by the package filter and
        the number of tree nodes built.
        """
        kept = filter_records(records, snapshot.packages.strip())
        root = build_tree(
            kept,
            snapshot,
            delimiters=self.config.delimiters,
            constructor_name=self.config.constructor_name,
            skip_invalid=self.config.skip_invalid_signatures,
        )
        nodes_built = tree_stats(root).total
        rows = flatten_tree(root, snapshot.id, snapshot.customer_id)
        return rows, len(kept), nodes_built

    def create_and_save_snapshot_nodes(
        self, snapshot: SnapshotDescriptor, records: Sequence[InvocationRecord]
    ) -> BuildResult:
        """Build the snapshot's tree and write it out in chunks.

        The snapshot must already be stored (its id and customer id set).

        Raises:
            InvalidFilterPattern: the snapshot's package filter is malformed.
            InvalidSignatureFormat: a record could not be parsed and
                ``skip_invalid_signatures`` is off.
            MissingIdentity: the snapshot has no id or customer id.
        """
        rows, records_kept, nodes_built = self.build_nodes(snapshot, records)

        chunks = 0
        for batch in chunked(rows, self.config.chunk_size):
            self.store.save_nodes(batch)
            chunks += 1

        assert snapshot.id is not None
        logger.info(
            "Snapshot %d: %d/%d record(s) -> %d node(s), %d row(s) in %d chunk(s)",
            snapshot.id,
            records_kept,
            len(records),
            nodes_built,
            len(rows),
            chunks,
        )
        return BuildResult(
            snapshot_id=snapshot.id,
            records_in=len(records),
            records_kept=records_kept,
            nodes_built=nodes_built,
            rows_written=len(rows),
            chunks_written=chunks,
        )

    def recompute_snapshot_nodes(
        self, snapshot: SnapshotDescriptor, records: Sequence[InvocationRecord]
    ) -> BuildResult:
        """Replace a snapshot's stored tree: delete then insert, in one transaction."""
        with self.store.transaction():
            if snapshot.id is not None and snapshot.customer_id is not None:
                self.store.delete_by_snapshot(snapshot.customer_id, snapshot.id)
            return self.create_and_save_snapshot_nodes(snapshot, records)

    # ── queries ───────────────────────────────────────────────────

    def read_children(
        self, customer_id: int, snapshot_id: int, parent_signature: str = ""
    ) -> list[PersistedNode]:
        return self.store.find_children(customer_id, snapshot_id, parent_signature)

    def search_by_signature_substring(
        self,
        customer_id: int,
        snapshot_id: int,
        substring: str,
        exclude_node_id: Optional[int] = None,
    ) -> list[PersistedNode]:
        return self.store.find_by_signature_substring(
            customer_id, snapshot_id, substring, exclude_node_id
        )

    def delete_snapshot_tree(self, customer_id: int, snapshot_id: int) -> None:
        self.store.delete_by_snapshot(customer_id, snapshot_id)
