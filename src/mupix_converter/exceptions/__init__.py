"""Exception hierarchy for the MuPix converter."""

from .base import MupixConverterError
from .config import ConfigurationError, InvalidConfigError
from .decoding import DecodingError, FrameDecodeError, RawFileError
from .taxonomy import DiagnosticCode, Severity

__all__ = [
    "MupixConverterError",
    "DecodingError",
    "FrameDecodeError",
    "RawFileError",
    "ConfigurationError",
    "InvalidConfigError",
    "DiagnosticCode",
    "Severity",
]
