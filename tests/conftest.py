"""Shared fixtures: an isolated SQLite database, HTTP client and node store."""

import asyncio
import os
from uuid import uuid4

TEST_DB_PATH = os.path.join(os.path.dirname(__file__), "test.db")
TEST_DATABASE_URL = f"sqlite+aiosqlite:///{TEST_DB_PATH}"

# settings are cached on first import, so configure before importing webide
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["EVENTS_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import NullPool

from webide.db import session as db_session
from webide.db.models import Project, User
from webide.main import app
from webide.scripts.init_db import create_schema
from webide.store.nodes import NodeStore


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create the schema in a throwaway SQLite file and remove it afterwards."""
    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)

    # NullPool: the TestClient and async tests run on different event loops
    engine = db_session.make_engine(TEST_DATABASE_URL, poolclass=NullPool)
    db_session.engine = engine
    db_session.AsyncSessionLocal = db_session.make_sessionmaker(engine)
    asyncio.run(create_schema(engine))
    yield

    asyncio.run(engine.dispose())
    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)


@pytest.fixture()
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def register(client):
    """Register a fresh user and return auth headers for it."""

    def _register() -> dict[str, str]:
        email = f"{uuid4().hex}@example.com"
        resp = client.post(
            "/api/auth/register", params={"email": email, "password": "secret123"}
        )
        assert resp.status_code == 200
        resp = client.post(
            "/api/auth/login", params={"email": email, "password": "secret123"}
        )
        assert resp.status_code == 200
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}

    return _register


@pytest.fixture()
def anyio_backend():
    return "asyncio"


@pytest.fixture()
async def db(anyio_backend):
    async with db_session.AsyncSessionLocal() as session:
        yield session


@pytest.fixture()
async def project_id(db):
    user = User(id=str(uuid4()), email=f"{uuid4().hex}@example.com", password_hash="x")
    project = Project(id=str(uuid4()), owner_id=user.id, name="demo")
    db.add(user)
    db.add(project)
    await db.commit()
    return project.id


@pytest.fixture()
def store(db):
    return NodeStore(db)
