"""Tracker-data records for the aggregation path.

A record is one merged output frame for a single stream. Pixel records hold
MuPix sparse pixels, trigger records hold external-trigger entries. Records
are plain containers; what goes into them is decided by the aggregator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List

import numpy as np

from .constants import ZS_DATA_DEFAULT_ENCODING
from .encoding import EncodedTrigger

# Number of floats a MuPix pixel occupies in tracker-data storage
MUPIXEL_FLOATS = 6


@dataclass(frozen=True)
class MuPixel:
    """A MuPix sparse pixel.

    Attributes:
        x: Output column
        y: Output row
        signal: Binary signal, always 1
        time: Unused time field, always 0
        hit_time: 8-bit hit timestamp
        frame_time: Frame timestamp truncated to 32 bits
    """

    x: int
    y: int
    signal: int
    time: int
    hit_time: int
    frame_time: int

    def as_tuple(self) -> tuple[int, int, int, int, int, int]:
        return (self.x, self.y, self.signal, self.time, self.hit_time, self.frame_time)


@dataclass
class TrackerData:
    """Base record stamped with a cell id."""

    cell_id: int = 0
    cell_encoding: str = ZS_DATA_DEFAULT_ENCODING

    def __len__(self) -> int:
        raise NotImplementedError

    @property
    def empty(self) -> bool:
        return len(self) == 0


@dataclass
class PixelRecord(TrackerData):
    pixels: List[MuPixel] = field(default_factory=list)

    def add_sparse_pixel(self, pixel: MuPixel) -> None:
        self.pixels.append(pixel)

    def __len__(self) -> int:
        return len(self.pixels)

    def __iter__(self) -> Iterator[MuPixel]:
        return iter(self.pixels)

    def charge_values(self) -> np.ndarray:
        """Flatten the pixels into the float32 layout of tracker-data storage.

        Frame timestamps are stored as float32 and lose precision above 2**24.
        """
        if not self.pixels:
            return np.zeros(0, dtype=np.float32)
        return np.array([p.as_tuple() for p in self.pixels], dtype=np.float32).ravel()

    @classmethod
    def from_charge_values(cls, values: np.ndarray, cell_id: int = 0) -> PixelRecord:
        """Rebuild a pixel record from flattened charge values."""
        values = np.asarray(values)
        if values.size % MUPIXEL_FLOATS:
            raise ValueError(
                f"Charge values of length {values.size} are not a multiple of {MUPIXEL_FLOATS}"
            )
        rows = values.reshape(-1, MUPIXEL_FLOATS).astype(np.int64)
        return cls(cell_id=cell_id, pixels=[MuPixel(*map(int, row)) for row in rows])


@dataclass
class TriggerRecord(TrackerData):
    triggers: List[EncodedTrigger] = field(default_factory=list)

    def add_external_trigger(self, trigger: EncodedTrigger) -> None:
        self.triggers.append(trigger)

    def __len__(self) -> int:
        return len(self.triggers)

    def __iter__(self) -> Iterator[EncodedTrigger]:
        return iter(self.triggers)

    def values(self) -> List[int]:
        """The tagged 64-bit words in arrival order."""
        return [t.value for t in self.triggers]

    def labels(self) -> List[int]:
        return [t.label for t in self.triggers]
