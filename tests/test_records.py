"""Tests for tracker-data records."""

import numpy as np
import pytest

from mupix_converter.encoding import encode_tot, encode_trigger
from mupix_converter.models import TimeOverThreshold, Trigger
from mupix_converter.records import MuPixel, PixelRecord, TriggerRecord


class TestPixelRecord:
    def test_empty(self):
        record = PixelRecord()
        assert record.empty
        assert record.charge_values().shape == (0,)

    def test_charge_values_layout(self):
        record = PixelRecord()
        record.add_sparse_pixel(MuPixel(1, 2, 1, 0, 200, 12345))
        record.add_sparse_pixel(MuPixel(3, 4, 1, 0, 5, 6))
        values = record.charge_values()
        assert values.dtype == np.float32
        np.testing.assert_array_equal(values, [1, 2, 1, 0, 200, 12345, 3, 4, 1, 0, 5, 6])

    def test_from_charge_values(self):
        record = PixelRecord()
        record.add_sparse_pixel(MuPixel(1, 2, 1, 0, 200, 12345))
        rebuilt = PixelRecord.from_charge_values(record.charge_values())
        assert rebuilt.pixels == record.pixels

    def test_from_charge_values_bad_length(self):
        with pytest.raises(ValueError):
            PixelRecord.from_charge_values(np.zeros(5))


class TestTriggerRecord:
    def test_values_and_labels(self):
        record = TriggerRecord()
        record.add_external_trigger(encode_trigger(Trigger(timestamp=100, tag=0x1)))
        record.add_external_trigger(encode_tot(TimeOverThreshold(timestamp=200, length=3)))
        assert record.values() == [100 << 8 | 1, 200 << 8 | 3]
        assert record.labels() == [0x1, 0x2]
        assert len(record) == 2
        assert not record.empty
