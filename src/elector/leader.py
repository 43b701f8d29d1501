"""One-shot leader election over a shared election store.

Every candidate inserts a timestamped record into the group's collection
and then reads back the earliest surviving record. The candidate owning
that record is the leader; everyone else is a follower. Records expire
through the store's TTL index, so a stale election cleans itself up even
if nobody calls `cleanup()`.

This is not a lease: there is no renewal and no failover. Use it for
"which instance runs today's batch job" decisions.

Example:
    leader = Leader(MongoElectionStore.from_settings(), key="daily-job")
    await leader.initialize()

    if await leader.elect():
        await run_batch_job()
        await leader.cleanup()

    # Or as a context manager
    async with LeaderOnlyTask(store, key="daily-job") as task:
        if task.should_run:
            await run_batch_job()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import TracebackType
from typing import ParamSpec, TypeVar

from elector.candidate import CandidateConfig
from elector.errors import CollectionExistsError, IndexExistsError, InitializationError
from elector.store.base import (
    CANDIDATE_FIELD,
    CREATED_AT_FIELD,
    EARLIEST_FIRST,
    ElectionStore,
)

logger = logging.getLogger(__name__)

# Finest TTL monitor granularity MongoDB accepts
EXPIRY_SWEEP_SECONDS = 1


class ElectionState(str, Enum):
    """Where a candidate is in the election."""

    UNREGISTERED = "unregistered"
    REGISTERED = "registered"
    LEADER = "leader"
    FOLLOWER = "follower"
    CLEANED = "cleaned"


class ElectionEventType(str, Enum):
    """Notifications published by a candidate."""

    ELECTED = "elected"
    CLEANED = "cleaned"


@dataclass
class ElectionEvent:
    """A notification about this candidate's election."""

    type: ElectionEventType
    candidate_id: str
    group_key: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


EventHandler = Callable[[ElectionEvent], Awaitable[None]]


async def _best_effort(operation: Callable[[], Awaitable[None]]) -> Exception | None:
    """Run an operation, returning its error instead of raising it."""
    try:
        await operation()
    except Exception as e:
        return e
    return None


class Leader:
    """A candidate in a one-shot leader election.

    Args:
        store: Shared election store
        id: Unique identifier for this instance (random if None)
        ttl_ms: Election record time-to-live in ms, at least 5000
        key: Election group name; all candidates of one election share it
        on_elected: Called once when this candidate wins
        on_cleaned: Called once when `cleanup()` has dropped the group
    """

    def __init__(
        self,
        store: ElectionStore,
        id: str | None = None,
        ttl_ms: int | None = None,
        key: str | None = None,
        on_elected: EventHandler | None = None,
        on_cleaned: EventHandler | None = None,
    ):
        self.store = store
        self.config = CandidateConfig.create(id=id, ttl_ms=ttl_ms, key=key)
        self._state = ElectionState.UNREGISTERED

        self._handlers: list[EventHandler] = []
        self._on_elected: list[asyncio.Future[None]] = []

        if on_elected is not None:
            self.subscribe(self._only(ElectionEventType.ELECTED, on_elected))
        if on_cleaned is not None:
            self.subscribe(self._only(ElectionEventType.CLEANED, on_cleaned))

    @property
    def id(self) -> str:
        return self.config.id

    @property
    def ttl_ms(self) -> int:
        return self.config.ttl_ms

    @property
    def group_key(self) -> str:
        """Name of the collection holding this group's election records."""
        return self.config.group_key

    @property
    def election_deadline(self) -> float:
        return self.config.election_deadline

    @property
    def state(self) -> ElectionState:
        return self._state

    @property
    def is_leader(self) -> bool:
        """Check if this candidate won its last election."""
        return self._state == ElectionState.LEADER

    def subscribe(self, handler: EventHandler) -> None:
        """Subscribe a handler to this candidate's events."""
        self._handlers.append(handler)

    @staticmethod
    def _only(event_type: ElectionEventType, handler: EventHandler) -> EventHandler:
        async def filtered(event: ElectionEvent) -> None:
            if event.type == event_type:
                await handler(event)

        return filtered

    async def _publish(self, event_type: ElectionEventType) -> None:
        event = ElectionEvent(type=event_type, candidate_id=self.id, group_key=self.group_key)
        for handler in self._handlers:
            try:
                await handler(event)
            except Exception:
                logger.exception(f"Error in '{event_type.value}' handler for {self.group_key}")

    async def _tune_expiry_sweep(self) -> None:
        await self.store.ping()
        await self.store.set_expiry_sweep_interval(EXPIRY_SWEEP_SECONDS)

    async def initialize(self) -> bool:
        """Create the group's collection and its expiry index.

        Safe to call from every candidate, repeatedly and concurrently:
        an existing collection or index counts as success.

        If the store connection lacks admin privileges, expired records are
        only swept on the server's default cadence (60 seconds on MongoDB),
        which matters when running elections in quick succession.

        Returns:
            True once the collection exists with its expiry index

        Raises:
            InitializationError: If the collection or index cannot be created
        """
        # Errors ignored: the connection may not have admin privileges
        _ = await _best_effort(self._tune_expiry_sweep)

        try:
            try:
                await self.store.create_collection(self.group_key)
            except CollectionExistsError:
                logger.debug(f"Election collection {self.group_key} already exists")

            try:
                await self.store.create_ttl_index(
                    self.group_key, CREATED_AT_FIELD, self.config.ttl_seconds
                )
            except IndexExistsError as e:
                logger.warning(f"Keeping existing expiry index for {self.group_key}: {e}")
        except Exception as e:
            raise InitializationError(self.group_key, str(e)) from e

        logger.info(f"Initialized election group {self.group_key} (ttl={self.ttl_ms}ms)")
        return True

    async def elect(self) -> bool:
        """Register this candidate and check whether it is the leader.

        Each call inserts a new election record, so call it once per
        election attempt.

        Returns:
            True if this candidate is the leader
        """
        await self.store.insert_record(
            self.group_key,
            {CANDIDATE_FIELD: self.id, CREATED_AT_FIELD: datetime.now(timezone.utc)},
        )
        self._state = ElectionState.REGISTERED
        self.config.refresh_deadline()

        earliest = await self.store.find_earliest(
            self.group_key, EARLIEST_FIRST, projection=[CANDIDATE_FIELD]
        )

        if earliest is not None and earliest.get(CANDIDATE_FIELD) == self.id:
            await self._handle_election()
            return True

        self._state = ElectionState.FOLLOWER
        if earliest is None:
            logger.warning(f"Election records for {self.group_key} vanished before the query")
        else:
            logger.info(f"Following {earliest.get(CANDIDATE_FIELD)} in {self.group_key}")
        return False

    async def _handle_election(self) -> None:
        """Handle being elected as leader."""
        self._state = ElectionState.LEADER
        logger.info(f"Elected as leader for {self.group_key} as {self.id}")

        # Notify waiters
        for future in self._on_elected:
            if not future.done():
                future.set_result(None)
        self._on_elected.clear()

        await self._publish(ElectionEventType.ELECTED)

    async def cleanup(self) -> None:
        """Drop the group's collection once the TTL window has passed.

        Only the elected leader should call this. The record is held for
        the full TTL so no second election can pick another leader before
        this one's record would have expired anyway. Store errors are not
        retried.
        """
        wait = max(self.config.remaining_seconds(), 0.0)
        logger.info(f"Holding {self.group_key} for {wait:.3f}s before cleanup")
        await asyncio.sleep(wait)

        await self.store.drop_collection(self.group_key)
        self._state = ElectionState.CLEANED
        logger.info(f"Cleaned up election group {self.group_key}")

        await self._publish(ElectionEventType.CLEANED)

    async def wait_for_leadership(self, timeout: float | None = None) -> bool:
        """Wait until this candidate is elected.

        Args:
            timeout: Maximum time to wait in seconds (None = wait forever)

        Returns:
            True if leadership was acquired, False if timeout
        """
        if self.is_leader:
            return True

        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._on_elected.append(future)

        try:
            await asyncio.wait_for(future, timeout=timeout)
            return True
        except asyncio.TimeoutError:
            return False
        finally:
            # Already cleared if the election resolved it
            if future in self._on_elected:
                self._on_elected.remove(future)


class LeaderOnlyTask:
    """Context for work that should only run on the elected instance.

    Entering initializes the group and runs the election; leaving cleans
    up the group if this instance won.

    Example:
        async with LeaderOnlyTask(store, key="aggregation") as task:
            if task.should_run:
                await aggregate_data()
    """

    def __init__(
        self,
        store: ElectionStore,
        key: str | None = None,
        ttl_ms: int | None = None,
        id: str | None = None,
        cleanup: bool = True,
    ):
        self.leader = Leader(store, id=id, ttl_ms=ttl_ms, key=key)
        self.cleanup = cleanup

    @property
    def should_run(self) -> bool:
        """Check if the task should run (we are leader)."""
        return self.leader.is_leader

    async def __aenter__(self) -> "LeaderOnlyTask":
        await self.leader.initialize()
        await self.leader.elect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self.cleanup and self.leader.is_leader:
            await self.leader.cleanup()


P = ParamSpec("P")
R = TypeVar("R")


def leader_only(
    store_factory: Callable[[], ElectionStore],
    key: str | None = None,
    ttl_ms: int | None = None,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R | None]]]:
    """Decorator that makes a coroutine run only on the elected instance.

    Args:
        store_factory: Builds the election store for each call
        key: Election group name
        ttl_ms: Election record TTL in ms

    Example:
        @leader_only(MongoElectionStore.from_settings, key="daily-report")
        async def generate_daily_report():
            # Only runs on the leader instance
            ...
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R | None]]:
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R | None:
            async with LeaderOnlyTask(store_factory(), key=key, ttl_ms=ttl_ms) as task:
                if task.should_run:
                    return await func(*args, **kwargs)
                else:
                    logger.debug(f"Skipping {func.__name__} - not leader for '{key}'")
                    return None

        wrapper.__name__ = func.__name__
        wrapper.__doc__ = func.__doc__
        return wrapper

    return decorator
