"""CLI entry point: registers all subcommands."""

import typer

app = typer.Typer(
    name="usage-tree",
    help="usage-tree - Package/class/method usage trees from invocation telemetry",
    add_completion=False,
    rich_markup_mode="rich",
)


# Import subcommands to register them
from .root import main as _main_callback  # noqa: F401, E402
from .build import build as _build, recompute as _recompute  # noqa: F401, E402
from .snapshots import snapshots as _snapshots, delete as _delete  # noqa: F401, E402
from .browse import children as _children, search as _search  # noqa: F401, E402
