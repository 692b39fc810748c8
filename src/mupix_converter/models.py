"""Data models for raw readout events and decoded frame content.

A ``RawDataEvent`` is the only event representation the converter knows how
to decode. Dispatching between event kinds is the host's job; the converter
accepts ``RawDataEvent`` directly and treats anything else as nothing to
convert.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .constants import INVALID_TRIGGER_ID, MUPIX_EVENT_TYPE


@dataclass(frozen=True)
class Hit:
    """A single pixel activation as reported by the frame decoder.

    Attributes:
        row: Sensor row reported by the decoder
        col: Sensor column reported by the decoder
        timestamp_raw: 8-bit hit timestamp
        signal: Binary signal flag
    """

    row: int
    col: int
    timestamp_raw: int = 0
    signal: int = 1


@dataclass(frozen=True)
class Trigger:
    """An external trigger: absolute 64-bit timestamp and 16-bit tag.

    Tag 0x1 marks a TLU trigger, 0xBA a generic trigger. The tag is carried
    through, never interpreted.
    """

    timestamp: int
    tag: int


@dataclass(frozen=True)
class TimeOverThreshold:
    """A time-over-threshold entry: 48 significant timestamp bits and a pulse length."""

    timestamp: int
    length: int


@dataclass
class DecodedFrame:
    """Everything a frame decoder extracts from one raw block."""

    hits: List[Hit] = field(default_factory=list)
    triggers: List[Trigger] = field(default_factory=list)
    tots: List[TimeOverThreshold] = field(default_factory=list)
    frame_timestamp: int = 0

    @property
    def num_hits(self) -> int:
        return len(self.hits)


@dataclass
class RawBlock:
    """One raw byte block with its frame (trigger/TLU) identifier."""

    frame_id: int
    data: bytes


@dataclass
class RawDataEvent:
    """A raw readout event: an ordered list of byte blocks plus run markers.

    Attributes:
        event_type: Producer type string, used for converter lookup
        run_number: Run the event belongs to
        event_number: Sequence number within the run
        blocks: Raw blocks in arrival order
        bore: Event is a begin-of-run marker
        eore: Event is an end-of-run marker
    """

    event_type: str = MUPIX_EVENT_TYPE
    run_number: int = 0
    event_number: int = 0
    blocks: List[RawBlock] = field(default_factory=list)
    bore: bool = False
    eore: bool = False

    @classmethod
    def begin_of_run(cls, run_number: int = 0, event_type: str = MUPIX_EVENT_TYPE) -> RawDataEvent:
        return cls(event_type=event_type, run_number=run_number, bore=True)

    @classmethod
    def end_of_run(
        cls, run_number: int = 0, event_number: int = 0, event_type: str = MUPIX_EVENT_TYPE
    ) -> RawDataEvent:
        return cls(
            event_type=event_type, run_number=run_number, event_number=event_number, eore=True
        )

    def add_block(self, frame_id: int, data: bytes) -> int:
        """Append a block and return its index."""
        self.blocks.append(RawBlock(frame_id=frame_id, data=bytes(data)))
        return len(self.blocks) - 1

    def is_begin_of_run(self) -> bool:
        return self.bore

    def is_end_of_run(self) -> bool:
        return self.eore

    def num_blocks(self) -> int:
        return len(self.blocks)

    def get_block(self, i: int) -> bytes:
        return self.blocks[i].data

    def get_frame_id(self, i: int) -> int:
        return self.blocks[i].frame_id

    def last_frame_id(self) -> Optional[int]:
        """Frame id of the trailing block, or None for an event without blocks."""
        if not self.blocks:
            return None
        return self.blocks[-1].frame_id

    def trigger_id(self) -> int:
        """TLU trigger id of this event, or INVALID_TRIGGER_ID if undefined.

        The id is undefined for run markers and for events without blocks.
        """
        if self.bore or self.eore:
            return INVALID_TRIGGER_ID
        last = self.last_frame_id()
        if last is None or last == INVALID_TRIGGER_ID:
            return INVALID_TRIGGER_ID
        return last
