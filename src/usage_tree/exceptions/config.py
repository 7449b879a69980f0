"""Configuration exceptions: settings values and package filter patterns."""

from typing import Any

from .base import UsageTreeError


class ConfigurationError(UsageTreeError):
    """Base class for configuration-related errors."""

    pass


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class InvalidFilterPattern(ConfigurationError):
    """Raised when a snapshot's package filter contains a malformed glob."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(
            f"Invalid filter pattern: {pattern!r}",
            details={"reason": reason},
        )
        self.pattern = pattern
        self.reason = reason
