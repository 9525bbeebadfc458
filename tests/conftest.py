"""
Shared fixtures: an in-memory MongoDB per test and an HTTP client bound
to the FastAPI app with the database dependency overridden.
"""
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from app.db.mongodb import get_database
from app.main import app


@pytest.fixture
def db():
    """Create a fresh database for each test."""
    return AsyncMongoMockClient()["campus_trust_test"]


@pytest_asyncio.fixture
async def client(db):
    """HTTP client whose requests hit the mock database."""
    app.dependency_overrides[get_database] = lambda: db
    # Starlette re-raises unhandled errors after sending the 500 envelope
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()
