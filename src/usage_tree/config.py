"""Configuration loading and management for usage-tree.

Configuration sources are merged in priority order:
    1. Defaults (defined in TreeConfig)
    2. Global config (~/.usage-tree.toml)
    3. Project config (./usage-tree.toml)
    4. Explicit config file
    5. Environment variables (USAGE_TREE_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(chunk_size=500)
    >>> config.chunk_size
    500
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

ENV_PREFIX = "USAGE_TREE_"
CONFIG_FILENAME = "usage-tree.toml"


@dataclass(frozen=True)
class TreeConfig:
    """Settings for building and storing usage trees.

    Attributes:
        Tree construction:
            delimiters: Characters separating packages, classes and inner classes
            constructor_name: Method name the agents report for constructors
            skip_invalid_signatures: Skip (and log) unparseable records instead of
                aborting the whole batch

        Storage:
            chunk_size: Rows handed to the node store per write
            db_dir: Directory holding the SQLite tree database

        Defaults:
            default_customer_id: Customer id used by the CLI when none is given
            verbosity: Logging verbosity level
    """

    delimiters: tuple[str, ...] = (".", "$")
    constructor_name: str = "<init>"
    skip_invalid_signatures: bool = False

    chunk_size: int = 1000
    db_dir: str = ".usage-tree"

    default_customer_id: int = 1
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.chunk_size < 1:
            raise InvalidConfigError("chunk_size", self.chunk_size, "must be at least 1")

        if not self.delimiters:
            raise InvalidConfigError("delimiters", self.delimiters, "at least one delimiter is required")
        for delimiter in self.delimiters:
            if len(delimiter) != 1 or delimiter == "(":
                raise InvalidConfigError(
                    "delimiters", self.delimiters, "each delimiter must be a single character other than '('"
                )

        if not self.constructor_name:
            raise InvalidConfigError("constructor_name", self.constructor_name, "must not be empty")

        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError("verbosity", self.verbosity, "expected quiet, normal or verbose")

    @property
    def db_path(self) -> Path:
        """Location of the SQLite file inside ``db_dir``."""
        return Path(self.db_dir) / "tree.db"


DEFAULT_CONFIG = TreeConfig()


def load_config(config_file: Optional[Path] = None, **overrides) -> TreeConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored so unset CLI options keep file/env values.

    Returns:
        Validated TreeConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
    """
    merged: dict = {}

    global_config = Path.home() / f".{CONFIG_FILENAME}"
    if global_config.exists():
        merged.update(_read_config_file(global_config, "global config"))

    project_config = Path.cwd() / CONFIG_FILENAME
    if project_config.exists():
        merged.update(_read_config_file(project_config, "project config"))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_read_config_file(config_file, "config file"))

    merged.update(_load_env_vars())

    if overrides.pop("verbose", False):
        overrides["verbosity"] = "verbose"
    if overrides.pop("quiet", False):
        overrides["verbosity"] = "quiet"

    merged.update({k: v for k, v in overrides.items() if v is not None})

    if "delimiters" in merged:
        merged["delimiters"] = _coerce_delimiters(merged["delimiters"])

    try:
        return TreeConfig(**merged)
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _read_config_file(path: Path, label: str) -> dict:
    try:
        data = _load_toml_file(path)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Invalid {label} '{path}': {e}")

    # Settings may live at the top level or under a [usage-tree] table.
    section = data.get("usage-tree", data)
    if not isinstance(section, dict):
        raise ConfigurationError(f"Invalid {label} '{path}': [usage-tree] must be a table")
    return dict(section)


def _coerce_delimiters(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return tuple(value)
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value)
    raise InvalidConfigError("delimiters", value, "expected a string or list of characters")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from USAGE_TREE_* environment variables.

    Supported environment variables:
        USAGE_TREE_CHUNK_SIZE: int
        USAGE_TREE_DB_DIR: str
        USAGE_TREE_CONSTRUCTOR_NAME: str
        USAGE_TREE_SKIP_INVALID_SIGNATURES: bool (true/false/1/0)
        USAGE_TREE_DEFAULT_CUSTOMER_ID: int
        USAGE_TREE_VERBOSITY: quiet/normal/verbose
        USAGE_TREE_DELIMITERS: str (each character is one delimiter)

    Returns:
        Dict of field_name -> parsed_value for any USAGE_TREE_* vars found.
    """
    type_hints = get_type_hints(TreeConfig)

    result: dict[str, Any] = {}

    for field_name in TreeConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise ConfigurationError(f"Invalid {env_key}: {e}")
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # tuple[str, ...] delimiters: "." and "$" given as ".$"
    if origin is tuple:
        return tuple(value)

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigurationError: If tomllib/tomli not available
        Exception: If TOML parsing fails
    """
    try:
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
