"""Tests for the N-frame aggregator."""

import logging

import numpy as np
import pytest

from conftest import make_block, make_event
from mupix_converter.aggregator import FrameAggregator
from mupix_converter.cells import CellIDEncoder
from mupix_converter.config import ConverterConfig
from mupix_converter.constants import (
    PIXEL_COLLECTION_NAME,
    TOT_COLLECTION_NAME,
    TRIGGER_COLLECTION_NAME,
)
from mupix_converter.exceptions import DiagnosticCode
from mupix_converter.models import RawDataEvent
from mupix_converter.results import ConversionStatus
from mupix_converter.sink import LCEvent, NamedCollection

ALL_COLLECTIONS = [PIXEL_COLLECTION_NAME, TRIGGER_COLLECTION_NAME, TOT_COLLECTION_NAME]


@pytest.fixture
def aggregator():
    return FrameAggregator()


def records(dest):
    """The single record of each collection in pixel/trigger/tot order."""
    return [dest.get_collection(name)[0] for name in ALL_COLLECTIONS]


class TestMerge:
    """Test FrameAggregator.merge."""

    def test_example_single_frame(self, aggregator, example_event):
        dest = LCEvent()
        result = aggregator.merge([example_event], dest)

        assert result.status is ConversionStatus.CONVERTED
        pixels, triggers, tots = records(dest)
        assert triggers.values() == [100 << 8 | 0x1]
        assert tots.values() == [(200 & 0xFFFFFFFFFFFF) << 8 | 3]
        assert tots.labels() == [0x2]
        assert [(p.x, p.y) for p in pixels] == [(0, 0), (5, 10)]

    def test_pixel_fields(self, aggregator):
        block = make_block(hits=[(7, 3, 0xAB)], frame_timestamp=0xDEAD_BEEF_0000_0042)
        dest = LCEvent()
        aggregator.merge([make_event(block)], dest)

        pixel = dest.get_collection(PIXEL_COLLECTION_NAME)[0].pixels[0]
        assert pixel.as_tuple() == (7, 3, 1, 0, 0xAB, 0x0000_0042)

    def test_frame_timestamp_truncated_to_32_bits(self, aggregator):
        block = make_block(hits=[(1, 1)], frame_timestamp=2**32 + 9)
        dest = LCEvent()
        aggregator.merge([make_event(block)], dest)
        assert dest.get_collection(PIXEL_COLLECTION_NAME)[0].pixels[0].frame_time == 9

    def test_arrival_order(self, aggregator):
        """Entries follow frame, then block, then within-block order."""
        first = make_event(
            make_block(hits=[(1, 1), (2, 2)], triggers=[(10, 1)], tots=[(40, 1)]),
            make_block(hits=[(3, 3)], triggers=[(30, 1), (20, 0xBA)]),
        )
        second = make_event(make_block(hits=[(4, 4)], triggers=[(5, 1)], tots=[(7, 2), (6, 3)]))
        dest = LCEvent()
        result = aggregator.merge([first, second], dest)

        assert result.status is ConversionStatus.CONVERTED
        pixels, triggers, tots = records(dest)
        assert [p.x for p in pixels] == [1, 2, 3, 4]
        assert [t.timestamp for t in triggers] == [10, 30, 20, 5]
        assert [value & 0xFF for value in tots.values()] == [1, 2, 3]

    def test_window_without_tots_leaves_tot_collection_unregistered(self, aggregator):
        frame = make_event(make_block(hits=[(1, 1)], triggers=[(10, 1)]))
        dest = LCEvent()
        result = aggregator.merge([frame], dest)

        assert result.status is ConversionStatus.PARTIAL_FAILURE
        assert [s.name for s in result.failed_streams] == [TOT_COLLECTION_NAME]
        assert not dest.has_collection(TOT_COLLECTION_NAME)
        assert [p.x for p in dest.get_collection(PIXEL_COLLECTION_NAME)[0]] == [1]

    def test_out_of_range_hits_dropped(self, aggregator, caplog):
        block = make_block(hits=[(40, 0), (39, 31), (0, 32)], triggers=[(1, 1)], tots=[(2, 5)])
        dest = LCEvent()
        with caplog.at_level(logging.WARNING, logger="mupix_converter"):
            result = aggregator.merge([make_event(block)], dest)

        pixels = dest.get_collection(PIXEL_COLLECTION_NAME)[0]
        assert [(p.x, p.y) for p in pixels] == [(39, 31)]
        assert result.codes().count(DiagnosticCode.MC200) == 2
        assert "col = 40, row = 0" in caplog.text
        assert result.status is ConversionStatus.CONVERTED

    def test_each_valid_hit_exactly_once(self, aggregator):
        rng = np.random.default_rng(7)
        hits = [(int(r), int(c)) for r, c in rng.integers(0, 60, size=(50, 2))]
        dest = LCEvent()
        aggregator.merge([make_event(make_block(hits=hits))], dest)

        expected = [(r, c) for r, c in hits if r < 40 and c < 32]
        pixels = dest.get_collection(PIXEL_COLLECTION_NAME)[0]
        assert [(p.x, p.y) for p in pixels] == expected

    @pytest.mark.parametrize("n", [1, 2, 3])
    def test_empty_window_fails_every_stream(self, aggregator, n):
        """Frames without content give empty records and three stream failures."""
        dest = LCEvent()
        result = aggregator.merge([RawDataEvent(event_number=i) for i in range(n)], dest)

        assert result.status is ConversionStatus.FAILED
        assert len(result.failed_streams) == 3
        assert all(s.reason is DiagnosticCode.MC401 for s in result.streams)
        assert dest.collection_names() == []

    def test_streams_independent(self, aggregator):
        """A stream without entries fails without affecting the others."""
        event = make_event(make_block(hits=[(1, 1)], triggers=[(1, 1)]))
        dest = LCEvent()
        result = aggregator.merge([event], dest)

        assert result.status is ConversionStatus.PARTIAL_FAILURE
        assert result.stream(PIXEL_COLLECTION_NAME).registered
        assert result.stream(TRIGGER_COLLECTION_NAME).registered
        assert not result.stream(TOT_COLLECTION_NAME).registered
        assert dest.collection_names() == [PIXEL_COLLECTION_NAME, TRIGGER_COLLECTION_NAME]

    def test_existing_collection_reported_as_failure(self, aggregator, example_event):
        dest = LCEvent()
        existing = NamedCollection()
        dest.register(existing, TRIGGER_COLLECTION_NAME)

        result = aggregator.merge([example_event], dest)

        stream = result.stream(TRIGGER_COLLECTION_NAME)
        assert not stream.registered
        assert not stream.created
        assert stream.reason is DiagnosticCode.MC400
        assert len(existing) == 1
        assert result.status is ConversionStatus.PARTIAL_FAILURE
        assert result.stream(PIXEL_COLLECTION_NAME).registered

    def test_second_merge_into_same_event(self, aggregator, example_event):
        dest = LCEvent()
        aggregator.merge([example_event], dest)
        result = aggregator.merge([example_event], dest)

        assert result.status is ConversionStatus.FAILED
        assert len(dest.get_collection(PIXEL_COLLECTION_NAME)) == 2

    def test_window_prefix_property(self, aggregator, example_block):
        """Appending a frame extends the output; earlier entries stay a prefix."""
        frames = [make_event(example_block, event_number=i) for i in range(3)]
        outputs = []
        for n in (1, 2, 3):
            dest = LCEvent()
            aggregator.merge(frames[:n], dest)
            outputs.append([r for r in records(dest)])

        for shorter, longer in zip(outputs, outputs[1:]):
            for short_record, long_record in zip(shorter, longer):
                short_entries = list(short_record)
                assert list(long_record)[: len(short_entries)] == short_entries
                assert len(long_record) > len(short_record)

    def test_bore_first_frame(self, aggregator, example_event):
        dest = LCEvent()
        result = aggregator.merge([RawDataEvent.begin_of_run(), example_event], dest)
        assert result.status is ConversionStatus.NOTHING_TO_CONVERT
        assert result.errors[0].code is DiagnosticCode.MC101
        assert dest.collection_names() == []

    def test_eore_first_frame(self, aggregator, example_event):
        dest = LCEvent()
        result = aggregator.merge([RawDataEvent.end_of_run(), example_event], dest)
        assert result.status is ConversionStatus.NOTHING_TO_CONVERT
        assert result.warnings[0].code is DiagnosticCode.MC102

    def test_non_raw_member_is_noop(self, aggregator, example_event):
        dest = LCEvent()
        result = aggregator.merge([example_event, "not an event"], dest)
        assert result.status is ConversionStatus.NOTHING_TO_CONVERT
        assert result.ok
        assert dest.collection_names() == []

    @pytest.mark.parametrize("n", [0, 4])
    def test_window_size_checked(self, aggregator, example_event, n):
        with pytest.raises(ValueError):
            aggregator.merge([example_event] * n, LCEvent())

    def test_undecodable_block_skipped(self, aggregator, example_block):
        event = make_event(b"\x00", example_block)
        dest = LCEvent()
        result = aggregator.merge([event], dest)

        assert result.status is ConversionStatus.PARTIAL_FAILURE
        assert DiagnosticCode.MC300 in result.codes()
        assert len(dest.get_collection(PIXEL_COLLECTION_NAME)[0]) == 2


class TestCellIds:
    """Test the cell ids stamped onto merged records."""

    def test_pixel_cell_id(self, aggregator, example_event):
        dest = LCEvent()
        aggregator.merge([example_event], dest)
        pixels, triggers, tots = records(dest)

        decoded = CellIDEncoder().decode(pixels.cell_id)
        assert decoded == {"sensorID": 71, "sparsePixelType": 3}
        assert CellIDEncoder().decode(triggers.cell_id)["sensorID"] == 1
        assert CellIDEncoder().decode(tots.cell_id)["sensorID"] == 1

    @pytest.mark.parametrize("sensor_id, expected", [(601, 61), (701, 71), (127, 127)])
    def test_configured_sensor_id(self, example_event, sensor_id, expected):
        aggregator = FrameAggregator(config=ConverterConfig(sensor_id=sensor_id))
        dest = LCEvent()
        result = aggregator.merge([example_event], dest)

        assert result.status is ConversionStatus.CONVERTED
        pixels, _, _ = records(dest)
        assert CellIDEncoder().decode(pixels.cell_id)["sensorID"] == expected
