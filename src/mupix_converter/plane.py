"""Quick-look conversion: one raw event into one zero-suppressed plane.

The builder walks the raw blocks twice. The first pass only counts hits so
the plane header can be declared up front; the second pass re-decodes every
block and places the surviving hits at a running pixel index. Positions of
dropped hits stay unset, so the declared hit count can exceed the number of
set pixels.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from .config import DEFAULT_CONFIG, ConverterConfig
from .constants import BINARY_SIGNAL, INVALID_TRIGGER_ID, SENSOR_NUM_COLS, SENSOR_NUM_ROWS
from .decoder import FrameDecoder, TelescopeFrameDecoder
from .exceptions import DiagnosticCode, FrameDecodeError, Severity
from .filtering import HitFilter
from .logging_config import get_logger
from .models import DecodedFrame, RawDataEvent
from .results import ConversionResult, ConversionStatus, DiagnosticCollector

logger = get_logger(__name__)


@dataclass(frozen=True)
class PlanePixel:
    x: int
    y: int
    signal: int


@dataclass
class Plane:
    """Zero-suppressed pixel map of one sensor for one event.

    Attributes:
        sensor_id: Sensor identifier
        event_type: Producer type the plane came from
        sensor_type: Sensor type string
        cols: Declared number of columns
        rows: Declared number of rows
        declared_hits: Hit count declared in the header
        tlu_event: Trigger id of the event
        pixels: Set pixels keyed by their position index
    """

    sensor_id: int
    event_type: str
    sensor_type: str
    cols: int = 0
    rows: int = 0
    declared_hits: int = 0
    tlu_event: int = INVALID_TRIGGER_ID
    pixels: Dict[int, PlanePixel] = field(default_factory=dict)

    def set_size_zs(self, cols: int, rows: int, npixels: int) -> None:
        self.cols = cols
        self.rows = rows
        self.declared_hits = npixels
        self.pixels = {}

    def set_tlu_event(self, tlu_event: int) -> None:
        self.tlu_event = tlu_event

    def set_pixel(self, index: int, x: int, y: int, signal: int) -> None:
        if not 0 <= index < self.declared_hits:
            raise IndexError(f"Pixel index {index} outside declared size {self.declared_hits}")
        self.pixels[index] = PlanePixel(x=x, y=y, signal=signal)

    @property
    def hit_count(self) -> int:
        """Number of pixels actually set."""
        return len(self.pixels)

    def set_pixels(self) -> List[PlanePixel]:
        """Set pixels in position order."""
        return [self.pixels[i] for i in sorted(self.pixels)]

    def to_arrays(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return ``(x, y, pix)`` arrays of the declared length, zero where unset."""
        x = np.zeros(self.declared_hits, dtype=np.uint32)
        y = np.zeros(self.declared_hits, dtype=np.uint32)
        pix = np.zeros(self.declared_hits, dtype=np.float64)
        for index, pixel in self.pixels.items():
            x[index] = pixel.x
            y[index] = pixel.y
            pix[index] = pixel.signal
        return x, y, pix

    def hit_map(self) -> np.ndarray:
        """Dense ``(rows, cols)`` occupancy grid of the set pixels."""
        grid = np.zeros((self.rows, self.cols), dtype=np.uint16)
        for pixel in self.pixels.values():
            if pixel.x < self.cols and pixel.y < self.rows:
                grid[pixel.y, pixel.x] += 1
        return grid


@dataclass
class StandardEvent:
    """Destination event of the quick-look path."""

    run_number: int = 0
    event_number: int = 0
    planes: List[Plane] = field(default_factory=list)

    def add_plane(self, plane: Plane) -> None:
        self.planes.append(plane)

    def num_planes(self) -> int:
        return len(self.planes)


class PlaneBuilder:
    """Builds quick-look planes from single raw events."""

    def __init__(
        self,
        decoder: Optional[FrameDecoder] = None,
        hit_filter: Optional[HitFilter] = None,
        config: ConverterConfig = DEFAULT_CONFIG,
    ):
        self.decoder = decoder or TelescopeFrameDecoder()
        self.hit_filter = hit_filter or HitFilter()
        self.config = config

    def _new_plane(self) -> Plane:
        return Plane(
            sensor_id=self.config.sensor_id,
            event_type=self.config.event_type,
            sensor_type=self.config.sensor_type,
        )

    def build(self, raw_event, dest: Optional[StandardEvent] = None) -> ConversionResult:
        """Convert one raw event into a plane and attach it to ``dest``.

        Returns a result with status NOTHING_TO_CONVERT (and no plane) for
        run markers, events without blocks and anything that is not a
        ``RawDataEvent``.
        """
        diagnostics = DiagnosticCollector(logger)
        result = ConversionResult(diagnostics=diagnostics.diagnostics)

        if not isinstance(raw_event, RawDataEvent):
            diagnostics.emit(
                DiagnosticCode.MC100,
                Severity.DEBUG,
                f"not a raw data event: {type(raw_event).__name__}",
            )
            return result

        if raw_event.is_begin_of_run():
            # BORE events should be handled by the host before conversion
            diagnostics.emit(DiagnosticCode.MC101, Severity.ERROR, "got BORE during conversion")
            return result
        if raw_event.is_end_of_run():
            diagnostics.emit(DiagnosticCode.MC102, Severity.WARNING, "got EORE during conversion")
            return result

        if raw_event.num_blocks() == 0:
            diagnostics.emit(
                DiagnosticCode.MC104,
                Severity.DEBUG,
                f"event {raw_event.event_number} has no raw blocks",
            )
            return result

        # First pass: count hits for the plane header
        nhits = 0
        for i in range(raw_event.num_blocks()):
            frame = self._decode(raw_event, i, diagnostics)
            if frame is not None:
                nhits += frame.num_hits

        trigger_id = raw_event.get_frame_id(raw_event.num_blocks() - 1)

        plane = self._new_plane()
        plane.set_size_zs(SENSOR_NUM_COLS, SENSOR_NUM_ROWS, nhits)
        plane.set_tlu_event(trigger_id)

        # Second pass: place surviving hits at their running index
        index = 0
        for i in range(raw_event.num_blocks()):
            frame = self._decode(raw_event, i, diagnostics, report=False)
            if frame is None:
                continue
            for j, hit in enumerate(frame.hits):
                pixel = self.hit_filter.quicklook(hit)
                if pixel is None:
                    diagnostics.emit(
                        DiagnosticCode.MC201,
                        Severity.DEBUG,
                        f"suppressed zero/zero hit in block {i}",
                        block=i,
                        index=index + j,
                    )
                    continue
                plane.set_pixel(index + j, pixel.x, pixel.y, BINARY_SIGNAL)
            index += frame.num_hits

        # TODO: confirm whether the trigger id cut is a warm-up workaround for a single run
        if trigger_id > self.config.quicklook_min_trigger_id:
            attached = plane
        else:
            diagnostics.emit(
                DiagnosticCode.MC103,
                Severity.INFO,
                f"trigger id {trigger_id} at or below {self.config.quicklook_min_trigger_id}, "
                "attaching empty plane",
                trigger_id=trigger_id,
            )
            attached = self._new_plane()
            attached.set_size_zs(SENSOR_NUM_COLS, SENSOR_NUM_ROWS, 0)
            attached.set_tlu_event(trigger_id)

        if dest is not None:
            dest.add_plane(attached)

        result.plane = attached
        result.status = (
            ConversionStatus.PARTIAL_FAILURE
            if diagnostics.has_errors()
            else ConversionStatus.CONVERTED
        )
        return result

    def _decode(
        self,
        raw_event: RawDataEvent,
        index: int,
        diagnostics: DiagnosticCollector,
        report: bool = True,
    ) -> Optional[DecodedFrame]:
        try:
            return self.decoder.decode(raw_event.get_block(index))
        except FrameDecodeError as e:
            if report:
                diagnostics.emit(
                    DiagnosticCode.MC300,
                    Severity.ERROR,
                    f"skipping block {index} of event {raw_event.event_number}: {e}",
                    block=index,
                )
            return None
