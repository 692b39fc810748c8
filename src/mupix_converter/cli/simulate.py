"""Simulate command: write a synthetic raw event file."""

from pathlib import Path
from typing import Optional

import typer

from ..rawfile import write_raw_events
from ..simulation import simulate_run
from . import app
from ._common import console


@app.command()
def simulate(
    out: Path = typer.Argument(..., dir_okay=False, help="Output raw event file"),
    events: int = typer.Option(100, "--events", "-n", min=1, help="Number of data events"),
    hits: float = typer.Option(4.0, "--hits", min=0.0, help="Mean hits per block"),
    noise: float = typer.Option(
        0.0, "--noise", min=0.0, max=1.0, help="Fraction of hits outside the sensor"
    ),
    first_trigger: int = typer.Option(0, "--first-trigger", min=0, help="First trigger id"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed"),
):
    """Write a synthetic run (BORE, data events, EORE) to OUT."""
    run = simulate_run(
        n_events=events,
        mean_hits=hits,
        first_trigger_id=first_trigger,
        noise_fraction=noise,
        seed=seed,
    )
    written = write_raw_events(out, run)
    console.print(f"[green]Wrote {written} events to {out}[/green]")
