import time
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from mongomock_motor import AsyncMongoMockClient

from instaclone import core, dependencies
from instaclone.main import app


@pytest.fixture(autouse=True)
def mongo(monkeypatch):
    """Swap the MongoDB client for an in-memory one and rebuild the singletons."""
    client = AsyncMongoMockClient()
    monkeypatch.setattr(core, 'MONGO', client)
    dependencies.reset()
    yield client
    dependencies.reset()


@pytest.fixture
def registry():
    return dependencies.get_registry()


@pytest.fixture
def store():
    return dependencies.get_content_store()


@pytest.fixture
def now():
    return int(time.time() * 1000)


@pytest_asyncio.fixture
async def client():
    await dependencies.get_registry().ensure_indexes()
    async with AsyncClient(transport=ASGITransport(app=app), base_url='http://test') as ac:
        yield ac
