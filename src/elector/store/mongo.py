"""MongoDB election store.

Uses the motor async driver. The client is created once per process from
settings and shared by every store instance built with `get_database()`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import CollectionInvalid, OperationFailure

from elector.config import settings
from elector.errors import CollectionExistsError, IndexExistsError
from elector.store.base import EARLIEST_FIRST, ElectionStore, SortSpec

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorDatabase

logger = logging.getLogger(__name__)

# MongoDB server error codes
NAMESPACE_EXISTS = 48
INDEX_ALREADY_EXISTS = 68
INDEX_OPTIONS_CONFLICT = 85
INDEX_KEY_SPECS_CONFLICT = 86

INDEX_EXISTS_CODES = {INDEX_ALREADY_EXISTS, INDEX_OPTIONS_CONFLICT, INDEX_KEY_SPECS_CONFLICT}

# Module-level client
_mongo_client: AsyncIOMotorClient | None = None


def get_client() -> AsyncIOMotorClient:
    """Get or create the MongoDB client."""
    global _mongo_client
    if _mongo_client is None:
        _mongo_client = AsyncIOMotorClient(
            settings.mongo_url,
            serverSelectionTimeoutMS=settings.mongo_server_selection_timeout_ms,
        )
    return _mongo_client


def get_database(name: str | None = None) -> AsyncIOMotorDatabase:
    """Get the election database (defaults to settings.mongo_database)."""
    return get_client()[name or settings.mongo_database]


def close_client() -> None:
    """Close MongoDB connections."""
    global _mongo_client
    if _mongo_client is not None:
        _mongo_client.close()
        _mongo_client = None


class MongoElectionStore(ElectionStore):
    """Election store backed by a MongoDB database.

    Election records expire through a TTL index. MongoDB's TTL monitor
    runs every 60 seconds unless `ttlMonitorSleepSecs` is lowered, which
    requires admin rights on the connection.

    Args:
        database: Motor database holding the election collections
    """

    def __init__(self, database: AsyncIOMotorDatabase):
        self.database = database

    @classmethod
    def from_settings(cls) -> "MongoElectionStore":
        """Create a store on the database configured in settings."""
        return cls(get_database())

    async def ping(self) -> None:
        await self.database.command("ping")

    async def set_expiry_sweep_interval(self, seconds: int) -> None:
        await self.database.client.admin.command(
            {"setParameter": 1, "ttlMonitorSleepSecs": seconds}
        )

    async def create_collection(self, name: str) -> None:
        try:
            await self.database.create_collection(name)
        except CollectionInvalid as e:
            raise CollectionExistsError(name) from e
        except OperationFailure as e:
            if e.code == NAMESPACE_EXISTS:
                raise CollectionExistsError(name) from e
            raise
        logger.debug(f"Created collection {name}")

    async def create_ttl_index(self, name: str, field: str, expire_after_seconds: float) -> None:
        # Whole seconds go over the wire as an int
        if float(expire_after_seconds).is_integer():
            expire_after_seconds = int(expire_after_seconds)
        try:
            await self.database[name].create_index(
                [(field, 1)],
                expireAfterSeconds=expire_after_seconds,
            )
        except OperationFailure as e:
            if e.code in INDEX_EXISTS_CODES:
                raise IndexExistsError(name, field, str(e.details or e)) from e
            raise
        logger.debug(f"Ensured TTL index on {name}.{field} ({expire_after_seconds}s)")

    async def insert_record(self, name: str, document: dict[str, Any]) -> Any:
        # insert_one mutates its argument with the generated _id
        result = await self.database[name].insert_one(dict(document))
        return result.inserted_id

    async def find_earliest(
        self,
        name: str,
        sort: SortSpec = EARLIEST_FIRST,
        projection: list[str] | None = None,
    ) -> dict[str, Any] | None:
        return await self.database[name].find_one(
            {},
            sort=sort,
            projection={field: 1 for field in projection} if projection else None,
        )

    async def drop_collection(self, name: str) -> None:
        await self.database.drop_collection(name)
        logger.debug(f"Dropped collection {name}")
