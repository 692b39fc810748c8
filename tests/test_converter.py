"""Tests for the converter facade and registry."""

import pytest

from conftest import make_block, make_event
from mupix_converter.config import ConverterConfig
from mupix_converter.constants import INVALID_TRIGGER_ID, PIXEL_COLLECTION_NAME
from mupix_converter.converter import ConverterRegistry, MupixConverter, default_registry
from mupix_converter.models import RawDataEvent
from mupix_converter.plane import StandardEvent
from mupix_converter.results import ConversionStatus
from mupix_converter.sink import LCEvent


class TestTriggerId:
    """Test MupixConverter.get_trigger_id."""

    def test_last_block_id(self, example_block):
        event = make_event(example_block, example_block, frame_ids=[7, 8])
        assert MupixConverter().get_trigger_id(event) == 8

    @pytest.mark.parametrize(
        "event",
        [RawDataEvent.begin_of_run(), RawDataEvent.end_of_run(), RawDataEvent()],
    )
    def test_undefined(self, event):
        assert MupixConverter().get_trigger_id(event) == INVALID_TRIGGER_ID

    def test_invalid_trailing_id(self, example_block):
        event = make_event(example_block, frame_ids=[INVALID_TRIGGER_ID])
        assert MupixConverter().get_trigger_id(event) == INVALID_TRIGGER_ID

    def test_not_raw(self):
        assert MupixConverter().get_trigger_id(None) == INVALID_TRIGGER_ID


class TestConversionCalls:
    def test_standard_sub_event(self, example_event):
        dest = StandardEvent()
        result = MupixConverter().get_standard_sub_event(dest, example_event)
        assert result.status is ConversionStatus.CONVERTED
        assert dest.planes[0].hit_count == 1

    def test_lcio_sub_event(self, example_event):
        dest = LCEvent()
        result = MupixConverter().get_lcio_sub_event(dest, [example_event, example_event])
        assert result.status is ConversionStatus.CONVERTED
        assert len(dest.get_collection(PIXEL_COLLECTION_NAME)[0]) == 4


class TestConvertStream:
    """Test sliding-window conversion of a run."""

    def run(self, n):
        events = [RawDataEvent.begin_of_run()]
        for i in range(1, n + 1):
            events.append(make_event(make_block(hits=[(i, i)]), frame_ids=[200 + i], event_number=i))
        events.append(RawDataEvent.end_of_run(event_number=n + 1))
        return events

    def test_one_output_per_data_event(self):
        converter = MupixConverter(ConverterConfig(window_size=2))
        outputs = list(converter.convert_stream(self.run(4)))
        assert [dest.event_number for dest, _ in outputs] == [1, 2, 3, 4]

    def test_windows_slide(self):
        converter = MupixConverter(ConverterConfig(window_size=3))
        outputs = list(converter.convert_stream(self.run(4)))
        pixel_xs = [
            [p.x for p in dest.get_collection(PIXEL_COLLECTION_NAME)[0]] for dest, _ in outputs
        ]
        assert pixel_xs == [[1, 2, 3], [2, 3, 4], [3, 4], [4]]


class TestConverterRegistry:
    def test_default_registry(self):
        registry = default_registry()
        assert "MUPIX7" in registry
        assert isinstance(registry.get("MUPIX7"), MupixConverter)

    def test_duplicate_registration(self):
        registry = ConverterRegistry()
        registry.register(MupixConverter())
        with pytest.raises(ValueError):
            registry.register(MupixConverter())

    def test_register_under_other_type(self):
        registry = ConverterRegistry()
        registry.register(MupixConverter(), event_type="MUPIX6")
        assert registry.event_types() == ["MUPIX6"]

    def test_unknown_type(self):
        with pytest.raises(KeyError):
            ConverterRegistry().get("TLU")
