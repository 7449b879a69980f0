"""Data models for invocation telemetry and persisted usage-tree nodes.

Input records and snapshot descriptors are immutable; ``TreeNode`` lives in
``usage_tree.tree.builder`` because it only exists during a build.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

CONSTRUCTOR_METHOD_NAME = "<init>"


class NodeType(Enum):
    """Kind of a node in the package/class/method hierarchy."""

    ROOT = "ROOT"
    PACKAGE = "PACKAGE"
    CLASS = "CLASS"
    METHOD = "METHOD"


@dataclass(frozen=True)
class InvocationRecord:
    """One observed (or never observed) call of a method.

    ``invoked_at_millis`` is epoch millis; zero or negative means the agent
    saw the method in the code base but never saw it called.
    """

    signature: str  # pkg.pkg.Class.method(args)
    method_name: str = ""
    invoked_at_millis: int = 0


@dataclass(frozen=True)
class SnapshotDescriptor:
    """A snapshot definition: which packages to include and the usage cutoff.

    ``id`` and ``customer_id`` are ``None`` until the snapshot row has been
    stored; nodes can only be flattened once both are known.
    """

    id: Optional[int] = None
    customer_id: Optional[int] = None
    packages: str = ""  # comma-separated globs, empty = everything
    filter_invoked_at_millis: int = 0
    name: str = ""
    created_at: str = ""  # ISO-8601


def is_used(invoked_at_millis: int, filter_invoked_at_millis: int) -> bool:
    """A record counts as used iff it was observed at all and not before the cutoff."""
    return invoked_at_millis > 0 and invoked_at_millis >= filter_invoked_at_millis


@dataclass(frozen=True)
class PersistedNode:
    """Storable row for one surviving tree node.

    ``parent_signature`` is the nearest ancestor that survived folding, or
    ``""`` for top-level rows. ``id`` is assigned by storage and ignored when
    comparing rows by value.
    """

    snapshot_id: int
    customer_id: int
    signature: str
    parent_signature: str
    type: NodeType
    used_count: int = 0
    unused_count: int = 0
    last_invoked_at_millis: Optional[int] = None
    id: Optional[int] = field(default=None, compare=False)
