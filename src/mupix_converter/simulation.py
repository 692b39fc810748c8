"""Synthetic test-beam data for exercising the converter without hardware."""

from __future__ import annotations

from typing import List, Optional

import numpy as np

from .constants import (
    GENERIC_TRIGGER_TAG,
    MUPIX_EVENT_TYPE,
    SENSOR_NUM_COLS,
    SENSOR_NUM_ROWS,
    TLU_TRIGGER_TAG,
)
from .decoder import encode_frame
from .models import Hit, RawDataEvent, TimeOverThreshold, Trigger

# Readout cycle length in timestamp ticks
FRAME_PERIOD = 128


def simulate_run(
    n_events: int = 100,
    mean_hits: float = 4.0,
    blocks_per_event: int = 1,
    run_number: int = 1,
    first_trigger_id: int = 0,
    noise_fraction: float = 0.0,
    seed: Optional[int] = None,
) -> List[RawDataEvent]:
    """Generate a run: BORE, ``n_events`` data events, EORE.

    Hit counts are Poisson distributed around ``mean_hits`` per block. A
    fraction ``noise_fraction`` of the hits is placed outside the sensor
    geometry to mimic corrupted readout words.
    """
    rng = np.random.default_rng(seed)
    events = [RawDataEvent.begin_of_run(run_number)]

    trigger_id = first_trigger_id
    for event_number in range(1, n_events + 1):
        event = RawDataEvent(
            event_type=MUPIX_EVENT_TYPE, run_number=run_number, event_number=event_number
        )
        for _ in range(blocks_per_event):
            frame_timestamp = trigger_id * FRAME_PERIOD
            data = _simulate_frame(rng, frame_timestamp, mean_hits, noise_fraction)
            event.add_block(trigger_id, data)
            trigger_id += 1
        events.append(event)

    events.append(RawDataEvent.end_of_run(run_number, n_events + 1))
    return events


def _simulate_frame(
    rng: np.random.Generator, frame_timestamp: int, mean_hits: float, noise_fraction: float
) -> bytes:
    n_hits = int(rng.poisson(mean_hits))
    # Decoder row maps onto the 40 output columns, decoder column onto the 32 output rows
    rows = rng.integers(0, SENSOR_NUM_COLS, size=n_hits)
    cols = rng.integers(0, SENSOR_NUM_ROWS, size=n_hits)
    noisy = rng.random(n_hits) < noise_fraction
    rows = np.where(noisy, rng.integers(SENSOR_NUM_COLS, 256, size=n_hits), rows)
    timestamps = rng.integers(0, 256, size=n_hits)

    hits = [
        Hit(row=int(r), col=int(c), timestamp_raw=int(t))
        for r, c, t in zip(rows, cols, timestamps)
    ]

    def offset() -> int:
        return frame_timestamp + int(rng.integers(0, FRAME_PERIOD))

    triggers = [Trigger(timestamp=offset(), tag=TLU_TRIGGER_TAG)]
    if rng.random() < 0.25:
        triggers.append(Trigger(timestamp=offset(), tag=GENERIC_TRIGGER_TAG))
    tots = [
        TimeOverThreshold(timestamp=offset(), length=int(length))
        for length in rng.integers(1, 64, size=int(rng.poisson(1.0)))
    ]
    return encode_frame(hits, triggers, tots, frame_timestamp=frame_timestamp)
