"""
usage-tree - Runtime usage trees for JVM code bases

Turns method-invocation telemetry from instrumented applications into a
package -> class -> method tree with used/unused counts per node, so
operators can see which code paths production actually exercises.
"""

__version__ = "0.1.0"

from .models import InvocationRecord, NodeType, PersistedNode, SnapshotDescriptor
from .service import BuildResult, SnapshotNodeService

__all__ = [
    "SnapshotNodeService",  # Main entry point
    "BuildResult",
    "InvocationRecord",
    "SnapshotDescriptor",
    "PersistedNode",
    "NodeType",
]
