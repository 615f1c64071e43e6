"""Pytest configuration and fixtures for ImpactCRM tests with real MongoDB."""

import asyncio
import os
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import pytest
import pytest_asyncio
from beanie import init_beanie
from httpx import ASGITransport, AsyncClient
from motor.motor_asyncio import AsyncIOMotorClient

from impactcrm.database import get_document_models
from impactcrm.models import MemberRole, Membership, Organization
from impactcrm.services.auth import create_access_token
from impactcrm.services.record_store import InMemoryRecordStore
from impactcrm.services.tenancy import TenantContext


# MongoDB connection URL for tests (can be overridden with env var)
TEST_MONGODB_URL = os.environ.get("TEST_MONGODB_URL", "mongodb://localhost:27017")

TEST_USER_ID = "user-member"
VIEWER_USER_ID = "user-viewer"
OUTSIDER_USER_ID = "user-outsider"


def create_test_app():
    """Create a FastAPI app configured for testing (no database lifespan)."""
    from fastapi import FastAPI
    from slowapi import _rate_limit_exceeded_handler
    from slowapi.errors import RateLimitExceeded

    from impactcrm import __version__
    from impactcrm.main import app as main_app
    from impactcrm.main import limiter
    from impactcrm.routers import import_router

    # Empty lifespan for testing - we manage the database ourselves
    @asynccontextmanager
    async def test_lifespan(app: FastAPI):
        yield

    test_app = FastAPI(
        title="ImpactCRM Test",
        version=__version__,
        lifespan=test_lifespan,
    )
    test_app.state.limiter = limiter
    test_app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    # Upload tests would otherwise trip the per-IP import limit
    import_router.limiter.enabled = False

    # Copy all routes (health included) from the main app
    for route in main_app.routes:
        test_app.routes.append(route)

    return test_app


_test_app = None


def get_test_app():
    """Get the test app singleton."""
    global _test_app
    if _test_app is None:
        _test_app = create_test_app()
    return _test_app


def auth_headers(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(data={'sub': user_id})}"}


@pytest.fixture(scope="session")
def event_loop_policy():
    """Use the default event loop policy."""
    return asyncio.DefaultEventLoopPolicy()


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def tenant() -> TenantContext:
    return TenantContext(organization_id="org-1", user_id="user-1", role=MemberRole.MEMBER)


@pytest_asyncio.fixture(scope="function")
async def mongo_client():
    """Create a MongoDB client for testing."""
    client = AsyncIOMotorClient(
        TEST_MONGODB_URL,
        maxPoolSize=10,
        minPoolSize=1,
    )
    yield client
    client.close()


@pytest_asyncio.fixture(scope="function")
async def init_test_db(mongo_client):
    """Initialize Beanie with a unique test database, dropped after the test."""
    db_name = f"test_impactcrm_{uuid.uuid4().hex[:8]}"
    db = mongo_client[db_name]

    await init_beanie(
        database=db,
        document_models=get_document_models(),
    )
    yield db

    await mongo_client.drop_database(db_name)


@pytest_asyncio.fixture(scope="function")
async def organization(init_test_db) -> Organization:
    """An organization with a member and a viewer."""
    org = Organization(name="Hope Mentoring", email_domain="hope.example.org")
    await org.insert()
    await Membership(
        user_id=TEST_USER_ID, organization_id=str(org.id), role=MemberRole.MEMBER
    ).insert()
    await Membership(
        user_id=VIEWER_USER_ID, organization_id=str(org.id), role=MemberRole.VIEWER
    ).insert()
    return org


@pytest_asyncio.fixture(scope="function")
async def other_organization(init_test_db) -> Organization:
    """A second tenant whose data must never leak into the first."""
    org = Organization(name="River Youth Services")
    await org.insert()
    return org


@asynccontextmanager
async def _client(headers: dict[str, str] | None = None) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=get_test_app())
    async with AsyncClient(transport=transport, base_url="http://test", headers=headers) as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def client(organization) -> AsyncGenerator[AsyncClient, None]:
    """Client authenticated as a member of ``organization``."""
    async with _client(auth_headers(TEST_USER_ID)) as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def viewer_client(organization) -> AsyncGenerator[AsyncClient, None]:
    """Client authenticated as a read-only viewer of ``organization``."""
    async with _client(auth_headers(VIEWER_USER_ID)) as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def outsider_client(organization) -> AsyncGenerator[AsyncClient, None]:
    """Client with a valid token but no organization membership."""
    async with _client(auth_headers(OUTSIDER_USER_ID)) as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def unauthenticated_client(init_test_db) -> AsyncGenerator[AsyncClient, None]:
    """Client without a bearer token."""
    async with _client() as ac:
        yield ac


@pytest.fixture
def app():
    """The test app, with dependency overrides cleared afterwards."""
    test_app = get_test_app()
    yield test_app
    test_app.dependency_overrides.clear()
