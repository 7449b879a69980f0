"""
Terminal logging for usage-tree.

Log records go to stderr through rich; stdout carries command output (tables
and JSON) only, so ``--json`` output can be piped.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

_ROOT_LOGGER = "usage_tree"

# TreeConfig.verbosity -> level of the usage_tree logger
LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.DEBUG,
}


def setup_logging(verbosity: str = "normal") -> logging.Logger:
    """
    Route the ``usage_tree`` logger to a rich stderr handler.

    Args:
        verbosity: ``quiet``, ``normal`` or ``verbose``, as in ``TreeConfig``.

    Returns:
        The ``usage_tree`` logger.

    Calling it again replaces the handler from the previous call, so several
    CLI invocations in one process log each record once.
    """
    logger = logging.getLogger(_ROOT_LOGGER)
    for handler in [h for h in logger.handlers if isinstance(h, RichHandler)]:
        logger.removeHandler(handler)

    verbose = verbosity == "verbose"
    logger.addHandler(
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            markup=False,
            show_path=verbose,
        )
    )
    logger.setLevel(LEVELS[verbosity])
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the ``usage_tree`` namespace; module names are prefixed if needed."""
    if name is None:
        return logging.getLogger(_ROOT_LOGGER)
    if not name.startswith(_ROOT_LOGGER):
        name = f"{_ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
