"""Tree build exceptions: signature parsing, snapshot identity, record input."""

from typing import Optional

from .base import UsageTreeError


class TreeBuildError(UsageTreeError):
    """Base class for errors raised while building a usage tree."""

    pass


class InvalidSignatureFormat(TreeBuildError):
    """Raised when an invocation signature cannot be split into a path."""

    def __init__(self, signature: str, reason: str, record_index: Optional[int] = None):
        super().__init__(
            f"Invalid signature format: {signature!r}",
            details={"reason": reason, "record_index": record_index},
        )
        self.signature = signature
        self.reason = reason
        self.record_index = record_index

    def at_index(self, record_index: int) -> "InvalidSignatureFormat":
        """Return a copy of this error annotated with the failing record's position."""
        return InvalidSignatureFormat(self.signature, self.reason, record_index)


class MissingIdentity(TreeBuildError):
    """Raised when a tree is flattened before its snapshot has been persisted."""

    def __init__(self, field: str):
        super().__init__(f"Snapshot {field} must be set before nodes can be stored")
        self.field = field


class RecordFormatError(UsageTreeError):
    """Raised when an invocation record file cannot be read."""

    def __init__(self, source: str, reason: str, location: Optional[str] = None):
        super().__init__(
            f"Cannot read invocation records from {source}",
            details={"location": location, "reason": reason},
        )
        self.source = source
        self.reason = reason
        self.location = location


class SnapshotNotFoundError(UsageTreeError):
    """Raised when a snapshot id does not exist in the tree database."""

    def __init__(self, snapshot_id: int):
        super().__init__(f"No snapshot with id={snapshot_id}")
        self.snapshot_id = snapshot_id
