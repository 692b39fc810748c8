"""Decoding exceptions: malformed frame buffers and raw event files."""

from pathlib import Path
from typing import Optional

from .base import MupixConverterError


class DecodingError(MupixConverterError):
    """Base class for errors raised while reading raw data."""

    pass


class FrameDecodeError(DecodingError):
    """Raised when a raw frame buffer cannot be decoded."""

    def __init__(self, reason: str, offset: Optional[int] = None):
        details = {"reason": reason}
        if offset is not None:
            details["offset"] = str(offset)

        super().__init__(f"Cannot decode telescope frame: {reason}", details=details)
        self.reason = reason
        self.offset = offset


class RawFileError(DecodingError):
    """Raised when a raw event file is malformed."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Invalid raw event file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason
