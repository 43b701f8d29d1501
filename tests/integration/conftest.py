"""Integration test fixtures using Docker.

Provides a containerized MongoDB so elections run against the real TTL
index and sort semantics.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse
from uuid import uuid4

import pytest
import pytest_asyncio
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from elector.store.mongo import MongoElectionStore

if TYPE_CHECKING:
    from docker.client import DockerClient
    from docker.models.containers import Container
else:
    DockerClient = Any  # type: ignore[misc,assignment]
    Container = Any  # type: ignore[misc,assignment]

MONGO_IMAGE = "mongo:7"


@dataclass
class MongoContainer:
    """Handle for a running MongoDB container."""

    container: Container
    host: str

    @property
    def url(self) -> str:
        self.container.reload()
        ports = self.container.attrs["NetworkSettings"]["Ports"].get("27017/tcp")
        if not ports:
            raise RuntimeError(f"MongoDB port not exposed on {self.container.short_id}")
        return f"mongodb://{self.host}:{ports[0]['HostPort']}"


def _docker_host(client: DockerClient) -> str:
    base_url = client.api.base_url
    if base_url.startswith(("unix://", "npipe://", "http+docker://")):
        return "localhost"
    return urlparse(base_url).hostname or "localhost"


@pytest.fixture(scope="session")
def docker_client() -> Iterator[DockerClient]:
    """Create a Docker client or skip if Docker is unavailable."""
    try:
        import docker

        client = docker.from_env()
        client.ping()
    except Exception as exc:
        pytest.skip(f"Docker not available: {exc}")
    yield client
    client.close()


@pytest.fixture(scope="session")
def mongo_url(docker_client: DockerClient) -> Iterator[str]:
    """Start MongoDB for the test session and return its URL."""
    container = docker_client.containers.run(
        MONGO_IMAGE,
        detach=True,
        ports={"27017/tcp": None},
    )
    try:
        yield MongoContainer(container=container, host=_docker_host(docker_client)).url
    finally:
        container.remove(force=True, v=True)


async def _wait_for_mongo(client: AsyncIOMotorClient, timeout: float = 30.0) -> None:
    deadline = time.monotonic() + timeout
    while True:
        try:
            await client.admin.command("ping")
            return
        except PyMongoError:
            if time.monotonic() > deadline:
                raise
            await asyncio.sleep(0.5)


@pytest_asyncio.fixture
async def mongo_store(mongo_url: str) -> AsyncIterator[MongoElectionStore]:
    """Election store on a fresh database for each test."""
    client: AsyncIOMotorClient = AsyncIOMotorClient(mongo_url, serverSelectionTimeoutMS=2000)
    await _wait_for_mongo(client)
    database_name = f"elector_test_{uuid4().hex[:8]}"

    yield MongoElectionStore(client[database_name])

    await client.drop_database(database_name)
    client.close()
