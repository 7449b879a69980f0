"""Fold a batch of invocation records into one counted package/class/method trie."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Union

from ..exceptions import InvalidSignatureFormat
from ..logging_config import get_logger
from ..models import (
    CONSTRUCTOR_METHOD_NAME,
    InvocationRecord,
    NodeType,
    SnapshotDescriptor,
    is_used,
)
from .signature import DEFAULT_DELIMITERS, classify, join_signature, parse_record

logger = get_logger(__name__)


@dataclass(eq=False)
class TreeNode:
    """A node of the in-memory usage trie.

    Children are keyed by path segment and owned by this node; the dict keeps
    insertion order so traversals are deterministic.
    """

    signature: str
    type: NodeType
    used_count: int = 0
    unused_count: int = 0
    last_invoked_at_millis: Optional[int] = None
    children: dict[str, "TreeNode"] = field(default_factory=dict)

    def record(self, used: bool, invoked_at_millis: int) -> None:
        """Apply one record's contribution to this node."""
        if used:
            self.used_count += 1
            if self.last_invoked_at_millis is None or invoked_at_millis > self.last_invoked_at_millis:
                self.last_invoked_at_millis = invoked_at_millis
        else:
            self.unused_count += 1

    def child(self, segment: str, constructor: bool = False) -> "TreeNode":
        """Return the child for ``segment``, creating it on first use.

        ``constructor`` marks the call segment of a constructor, whose
        signature is the class signature plus the parameter list.
        """
        node = self.children.get(segment)
        if node is None:
            node = TreeNode(
                signature=join_signature(self.signature, self.type, segment, constructor),
                type=classify(self.type, segment),
            )
            self.children[segment] = node
        return node


def new_root() -> TreeNode:
    return TreeNode(signature="", type=NodeType.ROOT)


def add_path(
    root: TreeNode,
    segments: Sequence[str],
    used: bool,
    invoked_at_millis: int,
    constructor: bool = False,
) -> TreeNode:
    """Walk ``segments`` from ``root``, counting the record on every node visited.

    ``constructor`` applies to the last segment only. Returns the terminal node.
    """
    node = root
    node.record(used, invoked_at_millis)
    last = len(segments) - 1
    for i, segment in enumerate(segments):
        node = node.child(segment, constructor and i == last)
        node.record(used, invoked_at_millis)
    return node


def build_tree(
    records: Iterable[InvocationRecord],
    threshold: Union[SnapshotDescriptor, int],
    *,
    delimiters: Sequence[str] = DEFAULT_DELIMITERS,
    constructor_name: str = CONSTRUCTOR_METHOD_NAME,
    skip_invalid: bool = False,
) -> TreeNode:
    """Build the usage trie for one snapshot.

    Args:
        records: Invocation records, already filtered. Order does not matter.
        threshold: The snapshot (its ``filter_invoked_at_millis`` is used) or
            the cutoff in epoch millis directly.
        delimiters: Characters separating name segments.
        constructor_name: ``method_name`` that marks a constructor.
        skip_invalid: Log and skip unparseable signatures instead of raising.

    Returns:
        The Root node. The whole batch has been consumed.

    Raises:
        InvalidSignatureFormat: for the first unparseable record (with its
            index), unless ``skip_invalid`` is set.
    """
    cutoff = threshold.filter_invoked_at_millis if isinstance(threshold, SnapshotDescriptor) else threshold

    root = new_root()
    processed = skipped = 0
    for index, record in enumerate(records):
        try:
            segments = parse_record(record, delimiters, constructor_name)
        except InvalidSignatureFormat as e:
            if not skip_invalid:
                raise e.at_index(index) from e
            logger.warning("Skipping record %d: %s", index, e)
            skipped += 1
            continue

        add_path(
            root,
            segments,
            is_used(record.invoked_at_millis, cutoff),
            record.invoked_at_millis,
            constructor=record.method_name == constructor_name,
        )
        processed += 1

    logger.debug("Built usage tree from %d record(s), %d skipped", processed, skipped)
    return root


@dataclass
class TreeStats:
    """Node counts of a built tree, Root excluded."""

    by_type: Counter = field(default_factory=Counter)
    max_depth: int = 0

    @property
    def total(self) -> int:
        return sum(self.by_type.values())


def tree_stats(root: TreeNode) -> TreeStats:
    stats = TreeStats()
    stack = [(child, 1) for child in root.children.values()]
    while stack:
        node, depth = stack.pop()
        stats.by_type[node.type] += 1
        stats.max_depth = max(stats.max_depth, depth)
        stack.extend((child, depth + 1) for child in node.children.values())
    return stats
