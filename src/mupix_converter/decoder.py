"""
Frame decoding: the FrameDecoder interface and the telescope frame codec.

The converter only depends on the ``FrameDecoder`` protocol. Decoders must be
deterministic and side-effect free: the quick-look path decodes every block
twice instead of keeping decoded state around.

Telescope frame layout (little endian):

    header   u64 frame_timestamp, u32 n_hits, u32 n_triggers, u32 n_tots
    hits     n_hits    x (u8 col, u8 row, u8 timestamp_raw, u8 reserved)
    triggers n_triggers x (u64 timestamp, u16 tag)
    tots     n_tots    x (u64 timestamp, u8 length)

Trailing bytes after the last section are ignored.
"""

from __future__ import annotations

from typing import Iterable, Protocol

import numpy as np

from .exceptions import FrameDecodeError
from .models import DecodedFrame, Hit, TimeOverThreshold, Trigger

HEADER_DTYPE = np.dtype(
    [("frame_timestamp", "<u8"), ("n_hits", "<u4"), ("n_triggers", "<u4"), ("n_tots", "<u4")]
)
HIT_DTYPE = np.dtype([("col", "u1"), ("row", "u1"), ("timestamp_raw", "u1"), ("reserved", "u1")])
TRIGGER_DTYPE = np.dtype([("timestamp", "<u8"), ("tag", "<u2")])
TOT_DTYPE = np.dtype([("timestamp", "<u8"), ("length", "u1")])


class FrameDecoder(Protocol):
    """Decodes one raw byte block into hits, triggers and ToT entries."""

    def decode(self, data: bytes) -> DecodedFrame:
        ...


class TelescopeFrameDecoder:
    """Reference decoder for the telescope frame layout."""

    def decode(self, data: bytes) -> DecodedFrame:
        """Decode a single telescope frame.

        Raises:
            FrameDecodeError: If the buffer is shorter than its header announces
        """
        buffer = memoryview(data)
        if len(buffer) < HEADER_DTYPE.itemsize:
            raise FrameDecodeError(
                f"buffer of {len(buffer)} bytes is shorter than the frame header", offset=0
            )

        header = np.frombuffer(buffer, dtype=HEADER_DTYPE, count=1)[0]
        offset = HEADER_DTYPE.itemsize

        hits, offset = _read_section(buffer, HIT_DTYPE, int(header["n_hits"]), offset, "hit")
        triggers, offset = _read_section(
            buffer, TRIGGER_DTYPE, int(header["n_triggers"]), offset, "trigger"
        )
        tots, offset = _read_section(buffer, TOT_DTYPE, int(header["n_tots"]), offset, "tot")

        return DecodedFrame(
            hits=[
                Hit(row=int(h["row"]), col=int(h["col"]), timestamp_raw=int(h["timestamp_raw"]))
                for h in hits
            ],
            triggers=[Trigger(timestamp=int(t["timestamp"]), tag=int(t["tag"])) for t in triggers],
            tots=[
                TimeOverThreshold(timestamp=int(t["timestamp"]), length=int(t["length"]))
                for t in tots
            ],
            frame_timestamp=int(header["frame_timestamp"]),
        )


def _read_section(buffer: memoryview, dtype: np.dtype, count: int, offset: int, what: str):
    size = dtype.itemsize * count
    if offset + size > len(buffer):
        raise FrameDecodeError(
            f"{what} section needs {size} bytes, {len(buffer) - offset} available", offset=offset
        )
    if count == 0:
        return np.empty(0, dtype=dtype), offset
    return np.frombuffer(buffer, dtype=dtype, count=count, offset=offset), offset + size


def encode_frame(
    hits: Iterable[Hit] = (),
    triggers: Iterable[Trigger] = (),
    tots: Iterable[TimeOverThreshold] = (),
    frame_timestamp: int = 0,
) -> bytes:
    """Serialize frame content into the telescope frame layout.

    Values are stored in their field widths; wider values are truncated the
    same way the readout hardware does.
    """
    hits = list(hits)
    triggers = list(triggers)
    tots = list(tots)

    header = np.zeros(1, dtype=HEADER_DTYPE)
    header["frame_timestamp"] = frame_timestamp & 0xFFFF_FFFF_FFFF_FFFF
    header["n_hits"] = len(hits)
    header["n_triggers"] = len(triggers)
    header["n_tots"] = len(tots)

    hit_array = np.zeros(len(hits), dtype=HIT_DTYPE)
    for i, hit in enumerate(hits):
        hit_array[i] = (hit.col & 0xFF, hit.row & 0xFF, hit.timestamp_raw & 0xFF, 0)

    trigger_array = np.zeros(len(triggers), dtype=TRIGGER_DTYPE)
    for i, trig in enumerate(triggers):
        trigger_array[i] = (trig.timestamp & 0xFFFF_FFFF_FFFF_FFFF, trig.tag & 0xFFFF)

    tot_array = np.zeros(len(tots), dtype=TOT_DTYPE)
    for i, tot in enumerate(tots):
        tot_array[i] = (tot.timestamp & 0xFFFF_FFFF_FFFF_FFFF, tot.length & 0xFF)

    return b"".join(
        arr.tobytes() for arr in (header, hit_array, trigger_array, tot_array)
    )
