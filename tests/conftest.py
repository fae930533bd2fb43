import os
import tempfile

# Settings are read at import time, so the test database has to be chosen first
_db_dir = tempfile.mkdtemp(prefix="shortlink-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{os.path.join(_db_dir, 'links.db')}")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

from shortlink.main import app
from shortlink.database import AsyncSessionLocal, Base, engine, init_models


@pytest.fixture
async def database():
    # ASGITransport does not run the app lifespan, so tables are managed here
    await init_models()
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()

@pytest.fixture
async def db(database) -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session

@pytest.fixture
def session_factory(database):
    """For tests that need one session per concurrent caller."""
    return AsyncSessionLocal

@pytest.fixture
async def client(database) -> AsyncGenerator[AsyncClient, None]:
    async with ASGITransport(app=app) as transport:
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            yield c
