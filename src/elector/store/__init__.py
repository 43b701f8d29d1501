"""Election stores for elector.

Provides the store abstraction the election protocol is written against:
- MongoElectionStore: MongoDB collections with TTL indexes
- InMemoryElectionStore: process-local store for tests
"""

from elector.store.base import (
    CANDIDATE_FIELD,
    CREATED_AT_FIELD,
    EARLIEST_FIRST,
    ID_FIELD,
    ElectionStore,
)
from elector.store.memory import InMemoryElectionStore
from elector.store.mongo import (
    MongoElectionStore,
    close_client,
    get_client,
    get_database,
)

__all__ = [
    # Interface
    "ElectionStore",
    "CANDIDATE_FIELD",
    "CREATED_AT_FIELD",
    "ID_FIELD",
    "EARLIEST_FIRST",
    # Implementations
    "InMemoryElectionStore",
    "MongoElectionStore",
    # Client
    "get_client",
    "get_database",
    "close_client",
]
