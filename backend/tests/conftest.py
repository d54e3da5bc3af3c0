"""
Document Catalog — Test Configuration (conftest.py)
====================================================

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: AsyncMock session for service unit tests
    ├── sample_document_payload: a valid POST /documents body
    ├── test_app: app wired to a fresh in-memory SQLite database
    └── test_client: HTTPX AsyncClient talking to test_app
"""

import os
from unittest.mock import AsyncMock, MagicMock

# Set before any doccatalog import: doccatalog.main builds a module-level app
os.environ["DATABASE_URI"] = "sqlite+aiosqlite://"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from doccatalog.config import Settings
from doccatalog.main import create_app


@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession (no database needed).

    Usage:
        mock_db_session.execute.return_value.scalars.return_value.all.return_value = rows
        mock_db_session.get.return_value = document
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock(return_value=None)
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_document_payload():
    return {
        "title": "Aggregation Pipeline",
        "description": "Reference for MongoDB aggregation stages",
        "url": "https://www.mongodb.com/docs/manual/aggregation/",
        "category": "mongodb",
        "tags": ["aggregation", "reference"],
        "status": "published",
    }


@pytest_asyncio.fixture
async def test_app():
    """
    Application backed by a private in-memory SQLite database.

    The database lives on a single StaticPool connection, so tables created
    here are visible to every request session.
    """
    settings = Settings(database_uri="sqlite+aiosqlite://", log_level="WARNING")
    app = create_app(settings)
    await app.state.database.create_all()
    yield app
    await app.state.database.dispose()


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    HTTPX client routed straight into the ASGI app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
