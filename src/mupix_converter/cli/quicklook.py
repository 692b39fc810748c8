"""Inspect command: quick-look planes for every event."""

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..converter import MupixConverter
from ..exceptions import RawFileError
from ..plane import StandardEvent
from ..rawfile import iter_raw_events
from . import app
from ._common import console, resolve_config


@app.command()
def inspect(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Raw event file"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file (TOML)"),
    limit: int = typer.Option(50, "--limit", "-n", min=1, help="Maximum events to list"),
):
    """Show the quick-look plane of each event."""
    settings = resolve_config(config)
    converter = MupixConverter(settings)

    table = Table(title=path.name)
    table.add_column("Event", justify="right")
    table.add_column("Trigger id", justify="right")
    table.add_column("Declared", justify="right")
    table.add_column("Set", justify="right")
    table.add_column("Status")

    shown = 0
    try:
        for event in iter_raw_events(path):
            if shown >= limit:
                break
            dest = StandardEvent(run_number=event.run_number, event_number=event.event_number)
            result = converter.get_standard_sub_event(dest, event)
            plane = result.plane
            trigger_id = converter.get_trigger_id(event)
            table.add_row(
                str(event.event_number),
                "-" if plane is None else str(trigger_id),
                "-" if plane is None else str(plane.declared_hits),
                "-" if plane is None else str(plane.hit_count),
                result.status.value,
            )
            shown += 1
    except RawFileError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(table)
