"""Output collections and the sink that owns them.

The sink is the persisted-event side of the conversion. The converter looks
collections up by name, creates them when missing, appends records and
registers newly created collections. ``LCEvent`` is the in-memory sink used by
the command line tools and the tests.

Lookup, create and append are not atomic. Calls touching the same event must
be serialized by the caller.
"""

from __future__ import annotations

from typing import Dict, Generic, Iterator, List, Protocol, Tuple, TypeVar

from .logging_config import get_logger

logger = get_logger(__name__)

TRACKER_DATA = "TrackerData"

RecordT = TypeVar("RecordT")


class NamedCollection(Generic[RecordT]):
    """An ordered sequence of records of one element type."""

    def __init__(self, type_name: str = TRACKER_DATA):
        self.type_name = type_name
        self._elements: List[RecordT] = []

    def push_back(self, record: RecordT) -> None:
        self._elements.append(record)

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self) -> Iterator[RecordT]:
        return iter(self._elements)

    def __getitem__(self, index: int) -> RecordT:
        return self._elements[index]

    def __repr__(self) -> str:
        return f"NamedCollection(type_name='{self.type_name}', size={len(self)})"


class CollectionSink(Protocol):
    """Owner of named output collections."""

    def get_or_create(
        self, name: str, type_name: str = TRACKER_DATA
    ) -> Tuple[NamedCollection, bool]:
        """Return ``(collection, existed)``; a new collection is not yet registered."""
        ...

    def append(self, handle: NamedCollection, record) -> None:
        ...

    def register(self, handle: NamedCollection, name: str) -> None:
        ...


class DuplicateCollectionError(ValueError):
    """Raised when a collection name is registered twice."""


class LCEvent:
    """In-memory event holding named collections."""

    def __init__(self, run_number: int = 0, event_number: int = 0):
        self.run_number = run_number
        self.event_number = event_number
        self._collections: Dict[str, NamedCollection] = {}

    def get_collection(self, name: str) -> NamedCollection:
        """Return a registered collection.

        Raises:
            KeyError: If no collection is registered under ``name``
        """
        try:
            return self._collections[name]
        except KeyError:
            raise KeyError(f"Collection '{name}' not available") from None

    def has_collection(self, name: str) -> bool:
        return name in self._collections

    def collection_names(self) -> List[str]:
        return list(self._collections)

    def get_or_create(
        self, name: str, type_name: str = TRACKER_DATA
    ) -> Tuple[NamedCollection, bool]:
        if name in self._collections:
            return self._collections[name], True
        return NamedCollection(type_name), False

    def append(self, handle: NamedCollection, record) -> None:
        handle.push_back(record)

    def register(self, handle: NamedCollection, name: str) -> None:
        if name in self._collections:
            raise DuplicateCollectionError(f"Collection '{name}' already exists")
        self._collections[name] = handle
        logger.debug(f"Registered collection '{name}' ({len(handle)} records)")
