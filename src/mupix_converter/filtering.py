"""Hit validation and axis remapping.

Decoded hits are stored with their axes swapped: the output column (x) is the
decoder's row and the output row (y) is the decoder's column. The tracking
framework cannot rotate a sensor by 90 degrees, so the rotation is applied
here, unconditionally, for both conversion paths.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .constants import SENSOR_NUM_COLS, SENSOR_NUM_ROWS
from .models import Hit


@dataclass(frozen=True)
class RemappedHit:
    """A hit in output coordinates.

    Attributes:
        x: Output column, taken from the decoder row
        y: Output row, taken from the decoder column
        timestamp_raw: 8-bit hit timestamp
    """

    x: int
    y: int
    timestamp_raw: int = 0

    @property
    def row(self) -> int:
        return self.y

    @property
    def col(self) -> int:
        return self.x


def remap(hit: Hit) -> RemappedHit:
    """Apply the fixed axis swap to a decoded hit."""
    return RemappedHit(x=hit.row, y=hit.col, timestamp_raw=hit.timestamp_raw & 0xFF)


def is_decoder_artifact(hit: Hit) -> bool:
    """True for the zero/zero hit the decoder emits for empty frames.

    The range checks are kept as found in the readout code; for a hit at
    (0, 0) they always hold, so this reduces to "hit sits at the origin".
    """
    return (hit.row == 0 and hit.col == 0) and hit.col <= 31 and hit.row <= 39


def in_sensor_geometry(hit: Hit) -> bool:
    """True if the remapped hit lies on the 40 x 32 sensor."""
    return hit.row < SENSOR_NUM_COLS and hit.col < SENSOR_NUM_ROWS


class HitFilter:
    """Selects and remaps hits for one of the two conversion paths."""

    def quicklook(self, hit: Hit) -> Optional[RemappedHit]:
        """Quick-look predicate: drop only the zero/zero decoder artifact."""
        if is_decoder_artifact(hit):
            return None
        return remap(hit)

    def aggregation(self, hit: Hit) -> Optional[RemappedHit]:
        """Aggregation predicate: drop hits outside the sensor geometry."""
        if not in_sensor_geometry(hit):
            return None
        return remap(hit)
