"""In-memory election store.

Suitable for tests and single-process runs. Mirrors the MongoDB behaviour
the protocol relies on: implicit collection creation on insert, duplicate
collection errors, TTL expiry, and a monotonically increasing `_id` used
as the tie-break.
"""

from __future__ import annotations

import itertools
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from elector.errors import CollectionExistsError, IndexExistsError
from elector.store.base import EARLIEST_FIRST, ID_FIELD, ElectionStore, SortSpec


@dataclass
class _Collection:
    documents: list[dict[str, Any]] = field(default_factory=list)
    # field name -> expireAfterSeconds
    ttl_indexes: dict[str, float] = field(default_factory=dict)


class InMemoryElectionStore(ElectionStore):
    """Election store held in process memory.

    Expired documents are removed lazily on every read, so no background
    sweeper is needed.

    Args:
        clock: Returns the current UNIX time; override to simulate expiry
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._collections: dict[str, _Collection] = {}
        self._ids = itertools.count(1)
        self.sweep_interval: int | None = None

    def collection_names(self) -> list[str]:
        return list(self._collections)

    def documents(self, name: str) -> list[dict[str, Any]]:
        """Live documents of a collection in insertion order."""
        self._expire(name)
        collection = self._collections.get(name)
        return [dict(doc) for doc in collection.documents] if collection else []

    def _expire(self, name: str) -> None:
        collection = self._collections.get(name)
        if collection is None or not collection.ttl_indexes:
            return

        now = self._clock()

        def expired(doc: dict[str, Any]) -> bool:
            for ttl_field, seconds in collection.ttl_indexes.items():
                value = doc.get(ttl_field)
                if isinstance(value, datetime) and value.timestamp() + seconds <= now:
                    return True
            return False

        collection.documents = [doc for doc in collection.documents if not expired(doc)]

    async def ping(self) -> None:
        return None

    async def set_expiry_sweep_interval(self, seconds: int) -> None:
        self.sweep_interval = seconds

    async def create_collection(self, name: str) -> None:
        if name in self._collections:
            raise CollectionExistsError(name)
        self._collections[name] = _Collection()

    async def create_ttl_index(self, name: str, field: str, expire_after_seconds: float) -> None:
        collection = self._collections.setdefault(name, _Collection())
        existing = collection.ttl_indexes.get(field)
        if existing is not None and existing != expire_after_seconds:
            raise IndexExistsError(
                name, field, f"expireAfterSeconds {existing} != {expire_after_seconds}"
            )
        collection.ttl_indexes[field] = expire_after_seconds

    async def insert_record(self, name: str, document: dict[str, Any]) -> Any:
        collection = self._collections.setdefault(name, _Collection())
        record = dict(document)
        record.setdefault(ID_FIELD, next(self._ids))
        collection.documents.append(record)
        return record[ID_FIELD]

    async def find_earliest(
        self,
        name: str,
        sort: SortSpec = EARLIEST_FIRST,
        projection: list[str] | None = None,
    ) -> dict[str, Any] | None:
        self._expire(name)
        collection = self._collections.get(name)
        if collection is None or not collection.documents:
            return None

        ordered = list(collection.documents)
        # Stable sorts applied from the least significant key
        for key, direction in reversed(sort):
            ordered.sort(key=lambda doc: doc[key], reverse=direction < 0)

        first = ordered[0]
        if projection is None:
            return dict(first)
        # MongoDB includes _id unless excluded
        return {k: v for k, v in first.items() if k in projection or k == ID_FIELD}

    async def drop_collection(self, name: str) -> None:
        self._collections.pop(name, None)
