"""N-frame aggregation: merge consecutive raw events into output records.

Readout cycles are short compared to the trigger spread, so a hit belonging
to a triggered particle can land in the frame after the trigger (or the one
after that). Merging a window of one to three consecutive events into one
output frame recovers those hits.

Per window the aggregator produces three records, one per stream:

    pixels    MuPix sparse pixels (sensor id, MuPix sparse pixel type)
    triggers  external triggers, carried as read (stream id 1)
    tots      ToT entries packed into tagged words, label 0x2 (stream id 1)

Entries keep strict arrival order (frame, then block, then position within
the block). Nothing is sorted or deduplicated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .cells import CellIDEncoder, cell_sensor_id
from .config import DEFAULT_CONFIG, ConverterConfig
from .constants import (
    BINARY_SIGNAL,
    FRAME_TIMESTAMP_MASK_32,
    MAX_WINDOW_SIZE,
    MIN_WINDOW_SIZE,
    SPARSE_PIXEL_TYPE_MUPIXEL,
    TRIGGER_STREAM_ID,
    ZS_DATA_DEFAULT_ENCODING,
)
from .decoder import FrameDecoder, TelescopeFrameDecoder
from .encoding import encode_tot, encode_trigger
from .exceptions import DiagnosticCode, FrameDecodeError, Severity
from .filtering import HitFilter
from .logging_config import get_logger
from .models import RawDataEvent
from .records import MuPixel, PixelRecord, TrackerData, TriggerRecord
from .results import ConversionResult, ConversionStatus, DiagnosticCollector, StreamResult
from .sink import TRACKER_DATA, CollectionSink

logger = get_logger(__name__)


@dataclass
class MergedFrame:
    """The three records built from one window."""

    pixels: PixelRecord
    triggers: TriggerRecord
    tots: TriggerRecord


class FrameAggregator:
    """Merges a window of consecutive raw events into one output frame."""

    def __init__(
        self,
        decoder: Optional[FrameDecoder] = None,
        hit_filter: Optional[HitFilter] = None,
        config: ConverterConfig = DEFAULT_CONFIG,
    ):
        self.decoder = decoder or TelescopeFrameDecoder()
        self.hit_filter = hit_filter or HitFilter()
        self.config = config

    def _new_records(self) -> MergedFrame:
        pixel_encoder = CellIDEncoder(ZS_DATA_DEFAULT_ENCODING)
        pixel_encoder["sensorID"] = cell_sensor_id(self.config.sensor_id)
        pixel_encoder["sparsePixelType"] = SPARSE_PIXEL_TYPE_MUPIXEL

        stream_encoder = CellIDEncoder(ZS_DATA_DEFAULT_ENCODING)
        stream_encoder["sensorID"] = TRIGGER_STREAM_ID

        merged = MergedFrame(pixels=PixelRecord(), triggers=TriggerRecord(), tots=TriggerRecord())
        pixel_encoder.set_cell_id(merged.pixels)
        stream_encoder.set_cell_id(merged.triggers)
        stream_encoder.set_cell_id(merged.tots)
        return merged

    def collect(
        self, frames: Sequence[RawDataEvent], diagnostics: DiagnosticCollector
    ) -> MergedFrame:
        """Decode every block of every frame and fill the three records."""
        merged = self._new_records()

        for frame_index, frame in enumerate(frames):
            for block_index in range(frame.num_blocks()):
                try:
                    data = self.decoder.decode(frame.get_block(block_index))
                except FrameDecodeError as e:
                    diagnostics.emit(
                        DiagnosticCode.MC300,
                        Severity.ERROR,
                        f"skipping block {block_index} of frame {frame_index}: {e}",
                        frame=frame_index,
                        block=block_index,
                    )
                    continue

                for trigger in data.triggers:
                    merged.triggers.add_external_trigger(encode_trigger(trigger))

                for tot in data.tots:
                    merged.tots.add_external_trigger(encode_tot(tot))

                # Frame timestamps are 64 bit but the record stores floats
                frame_time = data.frame_timestamp & FRAME_TIMESTAMP_MASK_32
                for hit in data.hits:
                    pixel = self.hit_filter.aggregation(hit)
                    if pixel is None:
                        diagnostics.emit(
                            DiagnosticCode.MC200,
                            Severity.WARNING,
                            f"col = {hit.row}, row = {hit.col}",
                            frame=frame_index,
                            block=block_index,
                        )
                        continue
                    merged.pixels.add_sparse_pixel(
                        MuPixel(
                            x=pixel.x,
                            y=pixel.y,
                            signal=BINARY_SIGNAL,
                            time=0,
                            hit_time=pixel.timestamp_raw,
                            frame_time=frame_time,
                        )
                    )

        return merged

    def merge(self, frames: Sequence, sink: CollectionSink) -> ConversionResult:
        """Merge a window of raw events and insert the records into ``sink``.

        Raises:
            ValueError: If the window is empty or longer than three frames
        """
        if not MIN_WINDOW_SIZE <= len(frames) <= MAX_WINDOW_SIZE:
            raise ValueError(
                f"Window must hold {MIN_WINDOW_SIZE} to {MAX_WINDOW_SIZE} frames, got {len(frames)}"
            )

        diagnostics = DiagnosticCollector(logger)
        result = ConversionResult(diagnostics=diagnostics.diagnostics)

        first = frames[0]
        if isinstance(first, RawDataEvent):
            if first.is_begin_of_run():
                # BORE events should be handled by the host before conversion
                diagnostics.emit(
                    DiagnosticCode.MC101, Severity.ERROR, "got BORE during lcio conversion"
                )
                return result
            if first.is_end_of_run():
                diagnostics.emit(
                    DiagnosticCode.MC102, Severity.WARNING, "got EORE during lcio conversion"
                )
                return result

        for position, frame in enumerate(frames):
            if not isinstance(frame, RawDataEvent):
                diagnostics.emit(
                    DiagnosticCode.MC100,
                    Severity.DEBUG,
                    f"window member {position} is not a raw data event: {type(frame).__name__}",
                )
                return result

        merged = self.collect(frames, diagnostics)

        streams = (
            (self.config.pixel_collection, merged.pixels, "Mupix"),
            (self.config.trigger_collection, merged.triggers, "trigger"),
            (self.config.tot_collection, merged.tots, "tot"),
        )
        for name, record, label in streams:
            result.streams.append(self._insert(sink, name, record, label, diagnostics))

        failed = len(result.failed_streams)
        if failed == len(result.streams):
            result.status = ConversionStatus.FAILED
        elif failed or diagnostics.has_errors():
            result.status = ConversionStatus.PARTIAL_FAILURE
        else:
            result.status = ConversionStatus.CONVERTED
        return result

    def _insert(
        self,
        sink: CollectionSink,
        name: str,
        record: TrackerData,
        label: str,
        diagnostics: DiagnosticCollector,
    ) -> StreamResult:
        collection, existed = sink.get_or_create(name, TRACKER_DATA)
        stream = StreamResult(name=name, entries=len(record), created=not existed)

        if existed:
            # The record still goes to the existing collection, but a fresh one was expected
            sink.append(collection, record)
            stream.reason = DiagnosticCode.MC400
            diagnostics.emit(
                DiagnosticCode.MC400,
                Severity.WARNING,
                f"FAILED to convert {label} event: collection '{name}' already exists",
                collection=name,
            )
            return stream

        if record.empty:
            # Neither the fresh collection nor the record is handed to the sink
            stream.reason = DiagnosticCode.MC401
            diagnostics.emit(
                DiagnosticCode.MC401,
                Severity.WARNING,
                f"FAILED to convert {label} event: no entries for collection '{name}'",
                collection=name,
            )
            return stream

        sink.append(collection, record)
        sink.register(collection, name)
        stream.registered = True
        return stream
