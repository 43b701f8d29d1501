"""One-shot leader election for small groups of processes over MongoDB.

Example:
    from elector import Leader, MongoElectionStore

    leader = Leader(MongoElectionStore.from_settings(), key="daily-job")
    await leader.initialize()
    if await leader.elect():
        await run_daily_job()
        await leader.cleanup()
"""

from elector.candidate import MIN_TTL_MS, CandidateConfig, group_key_for
from elector.errors import (
    CollectionExistsError,
    ElectionError,
    IndexExistsError,
    InitializationError,
    StoreError,
)
from elector.leader import (
    ElectionEvent,
    ElectionEventType,
    ElectionState,
    Leader,
    LeaderOnlyTask,
    leader_only,
)
from elector.store import ElectionStore, InMemoryElectionStore, MongoElectionStore

__version__ = "0.1.0"

__all__ = [
    # Protocol
    "Leader",
    "LeaderOnlyTask",
    "leader_only",
    "ElectionState",
    "ElectionEvent",
    "ElectionEventType",
    # Identity
    "CandidateConfig",
    "group_key_for",
    "MIN_TTL_MS",
    # Stores
    "ElectionStore",
    "InMemoryElectionStore",
    "MongoElectionStore",
    # Errors
    "ElectionError",
    "InitializationError",
    "StoreError",
    "CollectionExistsError",
    "IndexExistsError",
]
