"""CLI entry point; registers all subcommands."""

from pathlib import Path
from typing import Optional

import typer

from .. import __version__
from ..logging_config import setup_logging
from ._common import console

app = typer.Typer(
    name="mupix-converter",
    help="MuPix converter - raw telescope frames to tracker data",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"mupix-converter {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to FILE"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version"
    ),
):
    """Convert MuPix raw event files."""
    setup_logging(verbose=verbose, quiet=quiet, log_file=str(log_file) if log_file else None)


# Import subcommands to register them
from .convert import convert as _convert  # noqa: F401, E402
from .quicklook import inspect as _inspect  # noqa: F401, E402
from .simulate import simulate as _simulate  # noqa: F401, E402
