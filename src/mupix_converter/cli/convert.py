"""Convert command: merge event windows into tracker-data collections."""

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..converter import MupixConverter
from ..exceptions import RawFileError
from ..rawfile import iter_raw_events
from ..results import ConversionStatus
from . import app
from ._common import console, resolve_config


@app.command()
def convert(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Raw event file"),
    window: Optional[int] = typer.Option(
        None, "--window", "-w", min=1, max=3, help="Consecutive events merged per output frame"
    ),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file (TOML)"),
    show_all: bool = typer.Option(False, "--all", help="List every window, not only failures"),
):
    """
    Merge windows of consecutive events and summarize the output collections.

    [bold cyan]Examples:[/bold cyan]

      mupix-converter convert run000123.raw --window 3
    """
    settings = resolve_config(config, window)
    converter = MupixConverter(settings)

    table = Table(title=f"{path.name} (window {settings.window_size})")
    table.add_column("Event", justify="right")
    table.add_column("Status")
    table.add_column("Pixels", justify="right")
    table.add_column("Triggers", justify="right")
    table.add_column("ToTs", justify="right")

    totals = {name: 0 for name in settings.collection_names}
    windows = 0
    failed = 0
    try:
        for dest, result in converter.convert_stream(iter_raw_events(path)):
            windows += 1
            counts = [s.entries for s in result.streams]
            for stream in result.streams:
                totals[stream.name] += stream.entries
            if result.status is not ConversionStatus.CONVERTED:
                failed += 1
            if show_all or result.status is not ConversionStatus.CONVERTED:
                table.add_row(str(dest.event_number), result.status.value, *map(str, counts))
    except RawFileError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if table.row_count:
        console.print(table)
    console.print(
        f"Converted [bold]{windows}[/bold] windows, "
        f"[yellow]{failed}[/yellow] with failures; "
        + ", ".join(f"{name}: {count}" for name, count in totals.items())
    )
