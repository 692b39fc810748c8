"""Tests for the in-memory collection sink."""

import pytest

from mupix_converter.sink import DuplicateCollectionError, LCEvent, NamedCollection


class TestLCEvent:
    def test_get_or_create_new(self):
        event = LCEvent()
        collection, existed = event.get_or_create("pixels")
        assert not existed
        assert isinstance(collection, NamedCollection)
        # Created collections are not visible until registered
        assert not event.has_collection("pixels")

    def test_register_then_lookup(self):
        event = LCEvent()
        collection, _ = event.get_or_create("pixels")
        event.append(collection, "record")
        event.register(collection, "pixels")

        found, existed = event.get_or_create("pixels")
        assert existed
        assert found is collection
        assert list(event.get_collection("pixels")) == ["record"]

    def test_duplicate_register(self):
        event = LCEvent()
        event.register(NamedCollection(), "pixels")
        with pytest.raises(DuplicateCollectionError):
            event.register(NamedCollection(), "pixels")

    def test_missing_collection(self):
        with pytest.raises(KeyError):
            LCEvent().get_collection("missing")
