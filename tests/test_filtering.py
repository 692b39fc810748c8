"""Tests for hit validation and remapping."""

import pytest

from mupix_converter.filtering import (
    HitFilter,
    in_sensor_geometry,
    is_decoder_artifact,
    remap,
)
from mupix_converter.models import Hit


class TestRemap:
    """Test the fixed axis swap."""

    def test_axes_swapped(self):
        """Decoder (row=5, col=10) lands at output row 10, column 5."""
        pixel = remap(Hit(row=5, col=10, timestamp_raw=7))
        assert (pixel.row, pixel.col) == (10, 5)
        assert (pixel.x, pixel.y) == (5, 10)
        assert pixel.timestamp_raw == 7

    def test_hit_timestamp_limited_to_8_bits(self):
        assert remap(Hit(row=1, col=1, timestamp_raw=0x1AB)).timestamp_raw == 0xAB


class TestQuicklookPredicate:
    """Test the quick-look zero/zero suppression."""

    def test_origin_hit_is_artifact(self):
        assert is_decoder_artifact(Hit(row=0, col=0))

    @pytest.mark.parametrize("row,col", [(0, 1), (1, 0), (39, 31), (200, 200)])
    def test_other_hits_kept(self, row, col):
        """Only the origin is suppressed, even far outside the sensor."""
        assert HitFilter().quicklook(Hit(row=row, col=col)) is not None

    def test_origin_dropped(self):
        assert HitFilter().quicklook(Hit(row=0, col=0)) is None


class TestAggregationPredicate:
    """Test the geometry check of the aggregation path."""

    @pytest.mark.parametrize("row,col", [(0, 0), (39, 31), (20, 0), (0, 31)])
    def test_inside_kept(self, row, col):
        assert in_sensor_geometry(Hit(row=row, col=col))
        assert HitFilter().aggregation(Hit(row=row, col=col)) is not None

    @pytest.mark.parametrize("row,col", [(40, 0), (0, 32), (255, 255), (39, 32)])
    def test_outside_dropped(self, row, col):
        assert not in_sensor_geometry(Hit(row=row, col=col))
        assert HitFilter().aggregation(Hit(row=row, col=col)) is None

    def test_origin_kept_in_aggregation(self):
        """The aggregation path does not apply the zero/zero suppression."""
        pixel = HitFilter().aggregation(Hit(row=0, col=0))
        assert (pixel.x, pixel.y) == (0, 0)
