"""Converter facade and explicit converter registration.

``MupixConverter`` bundles the quick-look and aggregation paths behind the
three calls a host runtime makes. Converters are registered explicitly by the
host's composition root:

    registry = ConverterRegistry()
    registry.register(MupixConverter())
    converter = registry.get("MUPIX7")
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Protocol, Sequence

from .aggregator import FrameAggregator
from .config import DEFAULT_CONFIG, ConverterConfig
from .constants import INVALID_TRIGGER_ID
from .decoder import FrameDecoder, TelescopeFrameDecoder
from .filtering import HitFilter
from .logging_config import get_logger
from .models import RawDataEvent
from .plane import PlaneBuilder, StandardEvent
from .results import ConversionResult
from .sink import CollectionSink, LCEvent

logger = get_logger(__name__)


class Converter(Protocol):
    """What the host runtime expects from a registered converter."""

    event_type: str

    def get_trigger_id(self, event) -> int:
        ...

    def get_standard_sub_event(self, dest: StandardEvent, event) -> ConversionResult:
        ...

    def get_lcio_sub_event(self, dest: CollectionSink, frames: Sequence) -> ConversionResult:
        ...


class MupixConverter:
    """Converts MuPix raw events into planes and merged tracker-data records."""

    def __init__(
        self,
        config: ConverterConfig = DEFAULT_CONFIG,
        decoder: Optional[FrameDecoder] = None,
    ):
        self.config = config
        self.decoder = decoder or TelescopeFrameDecoder()
        hit_filter = HitFilter()
        self.plane_builder = PlaneBuilder(self.decoder, hit_filter, config)
        self.aggregator = FrameAggregator(self.decoder, hit_filter, config)

    @property
    def event_type(self) -> str:
        return self.config.event_type

    def get_trigger_id(self, event) -> int:
        """TLU trigger id of ``event``, or INVALID_TRIGGER_ID if it has none."""
        if not isinstance(event, RawDataEvent):
            return INVALID_TRIGGER_ID
        return event.trigger_id()

    def get_standard_sub_event(self, dest: StandardEvent, event) -> ConversionResult:
        return self.plane_builder.build(event, dest)

    def get_lcio_sub_event(self, dest: CollectionSink, frames: Sequence) -> ConversionResult:
        return self.aggregator.merge(frames, dest)

    def convert_stream(
        self, events: Iterable[RawDataEvent]
    ) -> Iterator[tuple[LCEvent, ConversionResult]]:
        """Convert a stream of raw events window by window.

        Each data event opens a window with the events that follow it, up to
        ``config.window_size`` events, and is converted into a fresh LCEvent.
        Run markers are skipped as window starts; the trailing events of a
        stream form shorter windows.
        """
        buffered: List[RawDataEvent] = [e for e in events if not e.is_begin_of_run()]
        for start, event in enumerate(buffered):
            if event.is_end_of_run():
                continue
            window = [
                e
                for e in buffered[start : start + self.config.window_size]
                if not e.is_end_of_run()
            ]
            dest = LCEvent(run_number=event.run_number, event_number=event.event_number)
            yield dest, self.get_lcio_sub_event(dest, window)


class ConverterRegistry:
    """Maps raw event types to converters."""

    def __init__(self) -> None:
        self._converters: Dict[str, Converter] = {}

    def register(self, converter: Converter, event_type: Optional[str] = None) -> None:
        key = event_type or converter.event_type
        if key in self._converters:
            raise ValueError(f"A converter for event type '{key}' is already registered")
        self._converters[key] = converter
        logger.debug(f"Registered converter for '{key}'")

    def get(self, event_type: str) -> Converter:
        try:
            return self._converters[event_type]
        except KeyError:
            raise KeyError(f"No converter registered for event type '{event_type}'") from None

    def __contains__(self, event_type: str) -> bool:
        return event_type in self._converters

    def event_types(self) -> List[str]:
        return sorted(self._converters)


def default_registry(config: ConverterConfig = DEFAULT_CONFIG) -> ConverterRegistry:
    """Registry with the MuPix converter registered under its event type."""
    registry = ConverterRegistry()
    registry.register(MupixConverter(config))
    return registry
