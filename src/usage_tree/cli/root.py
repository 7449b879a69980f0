"""Global options shared by every command."""

from pathlib import Path
from typing import Optional

import typer

from ..config import load_config
from ..exceptions import ConfigurationError
from ..logging_config import setup_logging
from . import app
from ._common import console


@app.callback()
def main(
    ctx: typer.Context,
    db_dir: Optional[Path] = typer.Option(
        None,
        "--db-dir",
        help="Directory holding tree.db (default: .usage-tree)",
        file_okay=False,
        dir_okay=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only log errors",
    ),
):
    """
    Build and browse usage trees of packages, classes and methods.

    [bold cyan]Examples:[/bold cyan]

      usage-tree build invocations.jsonl --packages "com.example.**"

      usage-tree children 1 --parent com.example.Foo

      usage-tree search 1 Controller
    """
    try:
        settings = load_config(
            config_file=config,
            db_dir=str(db_dir) if db_dir is not None else None,
            verbose=verbose,
            quiet=quiet,
        )
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)

    setup_logging(settings.verbosity)
    ctx.obj = {"config": settings}
