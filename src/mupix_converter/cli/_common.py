"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ..config import ConverterConfig, load_config
from ..exceptions import MupixConverterError

console = Console()


def resolve_config(config: Optional[Path] = None, window: Optional[int] = None) -> ConverterConfig:
    """Build the converter config from CLI options, exiting on invalid input."""
    try:
        return load_config(config_file=config, window_size=window)
    except MupixConverterError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(2)
