"""Raw event files: a length-prefixed container of RawDataEvents.

Layout (little endian):

    file header  4s magic "MPXR", u16 version, u16 reserved
    per event    u32 run, u32 event, u8 flags, u8 len(type), type, u32 n_blocks
    per block    u32 frame_id, u32 size, size bytes

Flag bit 0 marks a begin-of-run event, bit 1 an end-of-run event.
"""

from __future__ import annotations

import struct
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, List, Union

from .exceptions import RawFileError
from .logging_config import get_logger
from .models import RawDataEvent

logger = get_logger(__name__)

MAGIC = b"MPXR"
VERSION = 1

_FILE_HEADER = struct.Struct("<4sHH")
_EVENT_HEADER = struct.Struct("<IIBB")
_COUNT = struct.Struct("<I")
_BLOCK_HEADER = struct.Struct("<II")

FLAG_BORE = 0x1
FLAG_EORE = 0x2

PathLike = Union[str, Path]


def write_raw_events(path: PathLike, events: Iterable[RawDataEvent]) -> int:
    """Write events to ``path`` and return how many were written."""
    count = 0
    with open(path, "wb") as f:
        f.write(_FILE_HEADER.pack(MAGIC, VERSION, 0))
        for event in events:
            _write_event(f, event)
            count += 1
    logger.debug(f"Wrote {count} raw events to {path}")
    return count


def _write_event(f: BinaryIO, event: RawDataEvent) -> None:
    flags = (FLAG_BORE if event.bore else 0) | (FLAG_EORE if event.eore else 0)
    event_type = event.event_type.encode("utf-8")
    if len(event_type) > 255:
        raise ValueError(f"Event type '{event.event_type}' is longer than 255 bytes")
    f.write(_EVENT_HEADER.pack(event.run_number, event.event_number, flags, len(event_type)))
    f.write(event_type)
    f.write(_COUNT.pack(event.num_blocks()))
    for block in event.blocks:
        f.write(_BLOCK_HEADER.pack(block.frame_id, len(block.data)))
        f.write(block.data)


def iter_raw_events(path: PathLike) -> Iterator[RawDataEvent]:
    """Lazily read events from ``path``.

    Raises:
        RawFileError: If the file is not a raw event file or is truncated
    """
    path = Path(path)
    with open(path, "rb") as f:
        magic, version, _ = _unpack(f, _FILE_HEADER, path, "file header")
        if magic != MAGIC:
            raise RawFileError(path, f"bad magic {magic!r}")
        if version != VERSION:
            raise RawFileError(path, f"unsupported version {version}")

        while True:
            head = f.read(_EVENT_HEADER.size)
            if not head:
                return
            if len(head) < _EVENT_HEADER.size:
                raise RawFileError(path, "truncated event header")
            run_number, event_number, flags, type_len = _EVENT_HEADER.unpack(head)
            event_type = _read_exact(f, type_len, path, "event type").decode("utf-8")
            (n_blocks,) = _unpack(f, _COUNT, path, "block count")

            event = RawDataEvent(
                event_type=event_type,
                run_number=run_number,
                event_number=event_number,
                bore=bool(flags & FLAG_BORE),
                eore=bool(flags & FLAG_EORE),
            )
            for _ in range(n_blocks):
                frame_id, size = _unpack(f, _BLOCK_HEADER, path, "block header")
                event.add_block(frame_id, _read_exact(f, size, path, "block data"))
            yield event


def read_raw_events(path: PathLike) -> List[RawDataEvent]:
    return list(iter_raw_events(path))


def _read_exact(f: BinaryIO, size: int, path: Path, what: str) -> bytes:
    data = f.read(size)
    if len(data) != size:
        raise RawFileError(path, f"truncated {what}: expected {size} bytes, got {len(data)}")
    return data


def _unpack(f: BinaryIO, fmt: struct.Struct, path: Path, what: str) -> tuple:
    return fmt.unpack(_read_exact(f, fmt.size, path, what))
