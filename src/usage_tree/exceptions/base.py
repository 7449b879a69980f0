"""Root of the usage-tree exception hierarchy."""

from typing import Any, Mapping, Optional


class UsageTreeError(Exception):
    """An error usage-tree raises on purpose, as opposed to a bug.

    ``details`` holds the context a user needs to find the bad input (the
    signature, the record index, the file and line). Entries whose value is
    ``None`` are dropped, so subclasses can pass optional context as is.
    The CLI prints ``str(error)`` and exits 1.
    """

    def __init__(self, message: str, details: Optional[Mapping[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = {k: v for k, v in (details or {}).items() if v is not None}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} [{context}]"
