"""Pytest configuration для unit тестов."""

import random
from collections.abc import AsyncIterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from src.core.models import UserSummary
from src.services.mapping_service import MappingService
from src.services.task_selector import TaskSelector
from src.tests.unit.fakes import InMemoryLockCoordinator, InMemoryTaskStore


@pytest.fixture
def mock_redis() -> MagicMock:
    """Mock Redis client для тестирования."""
    redis = MagicMock()
    redis.hset = AsyncMock()
    redis.hgetall = AsyncMock(return_value={})
    redis.get = AsyncMock(return_value=None)
    redis.mget = AsyncMock(return_value=[])
    redis.set = AsyncMock(return_value=True)
    redis.delete = AsyncMock()
    redis.incr = AsyncMock(return_value=1)
    redis.zadd = AsyncMock()
    redis.zrange = AsyncMock(return_value=[])
    redis.zrangebyscore = AsyncMock(return_value=[])
    redis.zrevrangebyscore = AsyncMock(return_value=[])
    redis.sadd = AsyncMock()
    redis.srem = AsyncMock()
    redis.smembers = AsyncMock(return_value=set())
    redis.lpush = AsyncMock()
    redis.lindex = AsyncMock(return_value=None)
    redis.ping = AsyncMock(return_value=True)
    redis.aclose = AsyncMock()
    redis.register_script = MagicMock(side_effect=lambda script: AsyncMock(return_value=None))
    return redis


@pytest.fixture
def alice() -> UserSummary:
    return UserSummary(id=7, osm_id=100, display_name="alice")


@pytest.fixture
def bob() -> UserSummary:
    return UserSummary(id=8, osm_id=200, display_name="bob")


@pytest.fixture
def fake_store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


@pytest.fixture
def fake_locks() -> InMemoryLockCoordinator:
    return InMemoryLockCoordinator()


@pytest.fixture
def selector(fake_store: InMemoryTaskStore, fake_locks: InMemoryLockCoordinator) -> TaskSelector:
    """Селектор с фиксированным seed."""
    return TaskSelector(fake_store, fake_locks, rng=random.Random(42), proximity_pool_size=2)


@pytest.fixture
def mapping_service(
    fake_store: InMemoryTaskStore,
    fake_locks: InMemoryLockCoordinator,
    selector: TaskSelector,
) -> MappingService:
    return MappingService(fake_store, fake_locks, selector)  # type: ignore[arg-type]


@pytest.fixture
async def client(
    mapping_service: MappingService,
    fake_store: InMemoryTaskStore,
) -> AsyncIterator[AsyncClient]:
    """Test client для FastAPI приложения на fake хранилищах.

    ASGITransport не запускает lifespan, поэтому Redis не нужен.
    """
    from src.app import app
    from src.core.dependencies import get_mapping_service, get_task_store

    app.dependency_overrides[get_mapping_service] = lambda: mapping_service
    app.dependency_overrides[get_task_store] = lambda: fake_store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
