"""Shared test fixtures for the MuPix converter tests."""

import pytest

from mupix_converter.decoder import encode_frame
from mupix_converter.models import Hit, RawDataEvent, TimeOverThreshold, Trigger


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


def make_block(hits=(), triggers=(), tots=(), frame_timestamp=0):
    """Encode frame content given as plain tuples.

    hits: (row, col) or (row, col, timestamp_raw)
    triggers: (timestamp, tag)
    tots: (timestamp, length)
    """
    return encode_frame(
        [Hit(*h) for h in hits],
        [Trigger(*t) for t in triggers],
        [TimeOverThreshold(*t) for t in tots],
        frame_timestamp=frame_timestamp,
    )


def make_event(*blocks, frame_ids=None, event_number=1):
    """Build a RawDataEvent from encoded blocks."""
    event = RawDataEvent(event_number=event_number)
    for i, data in enumerate(blocks):
        frame_id = frame_ids[i] if frame_ids is not None else 1000 + i
        event.add_block(frame_id, data)
    return event


@pytest.fixture
def example_block():
    """Block with a zero/zero artifact, one real hit, one trigger and one ToT."""
    return make_block(
        hits=[(0, 0), (5, 10)],
        triggers=[(100, 0x1)],
        tots=[(200, 3)],
        frame_timestamp=0x1_2345_6789,
    )


@pytest.fixture
def example_event(example_block):
    """Single-block event with a trigger id above the quick-look threshold."""
    return make_event(example_block, frame_ids=[1234])
