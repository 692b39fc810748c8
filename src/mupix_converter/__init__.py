"""
MuPix converter - raw telescope frames to tracker data

Decodes bit-packed MuPix readout frames, validates and remaps hits, encodes
triggers and time-over-threshold entries into tagged 64-bit words, and merges
windows of consecutive frames into per-stream output records for track
reconstruction.
"""

__version__ = "0.3.0"

from .aggregator import FrameAggregator, MergedFrame
from .config import ConverterConfig, load_config
from .converter import ConverterRegistry, MupixConverter, default_registry
from .decoder import FrameDecoder, TelescopeFrameDecoder, encode_frame
from .encoding import EncodedTrigger, encode_tot, encode_trigger
from .models import DecodedFrame, Hit, RawDataEvent, TimeOverThreshold, Trigger
from .plane import Plane, PlaneBuilder, StandardEvent
from .results import ConversionResult, ConversionStatus, Diagnostic, StreamResult
from .sink import CollectionSink, LCEvent, NamedCollection

__all__ = [
    "MupixConverter",  # Main entry point
    "ConverterRegistry",
    "default_registry",
    "ConverterConfig",
    "load_config",
    "FrameAggregator",
    "MergedFrame",
    "PlaneBuilder",
    "Plane",
    "StandardEvent",
    "FrameDecoder",
    "TelescopeFrameDecoder",
    "encode_frame",
    "EncodedTrigger",
    "encode_trigger",
    "encode_tot",
    "Hit",
    "Trigger",
    "TimeOverThreshold",
    "DecodedFrame",
    "RawDataEvent",
    "ConversionResult",
    "ConversionStatus",
    "Diagnostic",
    "StreamResult",
    "CollectionSink",
    "LCEvent",
    "NamedCollection",
]
