"""Exception hierarchy for usage-tree."""

from .base import UsageTreeError
from .build import (
    InvalidSignatureFormat,
    MissingIdentity,
    RecordFormatError,
    SnapshotNotFoundError,
    TreeBuildError,
)
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidFilterPattern,
)

__all__ = [
    "UsageTreeError",
    "TreeBuildError",
    "InvalidSignatureFormat",
    "MissingIdentity",
    "RecordFormatError",
    "SnapshotNotFoundError",
    "ConfigurationError",
    "InvalidConfigError",
    "InvalidFilterPattern",
]
