"""Election store interface.

The protocol only needs an ordered document store with single-document
atomic inserts and TTL-based expiry:
- MongoElectionStore: MongoDB via motor, for real deployments
- InMemoryElectionStore: single-process store for tests and local runs
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

# Election record fields
CANDIDATE_FIELD = "candidateId"
CREATED_AT_FIELD = "createdAt"
ID_FIELD = "_id"

ASCENDING = 1

# Earliest surviving record first; identity breaks timestamp ties
EARLIEST_FIRST: list[tuple[str, int]] = [
    (CREATED_AT_FIELD, ASCENDING),
    (ID_FIELD, ASCENDING),
]

SortSpec = list[tuple[str, int]]


class ElectionStore(ABC):
    """Abstract election store interface."""

    @abstractmethod
    async def ping(self) -> None:
        """Check connectivity; raise if the store is unreachable."""
        pass

    @abstractmethod
    async def set_expiry_sweep_interval(self, seconds: int) -> None:
        """Ask the store to sweep expired documents every `seconds`.

        Usually needs administrative privileges.
        """
        pass

    @abstractmethod
    async def create_collection(self, name: str) -> None:
        """Create a collection.

        Raises:
            CollectionExistsError: If the collection already exists
        """
        pass

    @abstractmethod
    async def create_ttl_index(self, name: str, field: str, expire_after_seconds: float) -> None:
        """Expire documents `expire_after_seconds` after the time in `field`.

        Raises:
            IndexExistsError: If a conflicting index on `field` exists
        """
        pass

    @abstractmethod
    async def insert_record(self, name: str, document: dict[str, Any]) -> Any:
        """Atomically insert one document and return its identity."""
        pass

    @abstractmethod
    async def find_earliest(
        self,
        name: str,
        sort: SortSpec = EARLIEST_FIRST,
        projection: list[str] | None = None,
    ) -> dict[str, Any] | None:
        """Return the first document under `sort`, or None if empty."""
        pass

    @abstractmethod
    async def drop_collection(self, name: str) -> None:
        """Remove a collection and all of its documents."""
        pass
