"""Flatten a usage trie into storable rows.

Package nodes with exactly one child are folded away so that
``com -> com.foo -> com.foo.bar -> ...`` collapses to its deepest branching
point; the folded chain's children hang off the nearest surviving ancestor.
Class and method nodes are always kept.
"""

from __future__ import annotations

from typing import Iterator, Optional, Sequence, TypeVar

from ..exceptions import MissingIdentity
from ..models import NodeType, PersistedNode
from .builder import TreeNode

DEFAULT_CHUNK_SIZE = 1000

T = TypeVar("T")


def is_foldable(node: TreeNode) -> bool:
    return node.type == NodeType.PACKAGE and len(node.children) == 1


def _surviving(node: TreeNode) -> TreeNode:
    while is_foldable(node):
        node = next(iter(node.children.values()))
    return node


def flatten_tree(
    root: TreeNode, snapshot_id: Optional[int], customer_id: Optional[int]
) -> list[PersistedNode]:
    """Return one ``PersistedNode`` per surviving non-Root node.

    Rows come out in post-order (descendants before their node). The order is
    stable for a given tree shape but carries no meaning.

    Raises:
        MissingIdentity: if the snapshot has not been stored yet.
    """
    if snapshot_id is None:
        raise MissingIdentity("id")
    if customer_id is None:
        raise MissingIdentity("customer_id")

    rows: list[PersistedNode] = []

    # (node, parent signature, children already expanded)
    stack: list[tuple[TreeNode, str, bool]] = [
        (_surviving(child), "", False) for child in reversed(list(root.children.values()))
    ]
    while stack:
        node, parent_signature, expanded = stack.pop()
        if expanded:
            rows.append(
                PersistedNode(
                    snapshot_id=snapshot_id,
                    customer_id=customer_id,
                    signature=node.signature,
                    parent_signature=parent_signature,
                    type=node.type,
                    used_count=node.used_count,
                    unused_count=node.unused_count,
                    last_invoked_at_millis=node.last_invoked_at_millis,
                )
            )
            continue

        stack.append((node, parent_signature, True))
        for child in reversed(list(node.children.values())):
            stack.append((_surviving(child), node.signature, False))

    return rows


def chunked(rows: Sequence[T], size: int = DEFAULT_CHUNK_SIZE) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of at most ``size`` rows."""
    if size < 1:
        raise ValueError("chunk size must be at least 1")
    for start in range(0, len(rows), size):
        yield rows[start : start + size]
