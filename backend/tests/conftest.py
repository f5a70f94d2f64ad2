"""Pytest fixtures for dispatch tracker backend tests."""

import os

# Point the app-level engine at SQLite before dispatch_tracker is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from dispatch_tracker import models  # noqa: F401
from dispatch_tracker.config import Settings
from dispatch_tracker.database import Base, get_db
from dispatch_tracker.main import app
from dispatch_tracker.schemas.incident import FeedIncident

# Test database URL - in-memory SQLite shared across one test's connections
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def epoch_ms(value: datetime) -> int:
    """ArcGIS date fields are epoch milliseconds."""
    return int(value.timestamp() * 1000)


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        site_name="Nashville",
        local_timezone="America/Chicago",
        output_mode="status",
        first_poll_policy="baseline",
        debug=True,
    )


@pytest_asyncio.fixture
async def async_engine():
    """Create async engine for testing."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(
        async_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with database override."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def sample_datetime() -> datetime:
    """Poll time used across tests: noon in Nashville (CST)."""
    return datetime(2024, 1, 18, 18, 0, 0, tzinfo=UTC)


@pytest.fixture
def make_incident(sample_datetime) -> Callable[..., FeedIncident]:
    """Factory for normalized feed incidents."""

    def _make(
        incident_id: str,
        type_name: str = "BURGLARY",
        location: str | None = "100 BROADWAY",
        city: str | None = "NASHVILLE",
        received_at: datetime | None = None,
        type_code: str | None = None,
    ) -> FeedIncident:
        return FeedIncident(
            incident_id=incident_id,
            type_code=type_code,
            type_name=type_name,
            location=location,
            city=city,
            received_at=received_at or sample_datetime.replace(hour=16, minute=30),
        )

    return _make


@pytest.fixture
def make_feature(sample_datetime) -> Callable[..., dict[str, Any]]:
    """Factory for raw ArcGIS feature records."""

    def _make(
        object_id: int,
        type_name: str = "BURGLARY",
        location: str = "100 BROADWAY",
        city: str = "NASHVILLE",
        received_at: datetime | None = None,
    ) -> dict[str, Any]:
        received_at = received_at or sample_datetime.replace(hour=16, minute=30)
        return {
            "attributes": {
                "ObjectId": object_id,
                "IncidentTypeCode": "52P",
                "IncidentTypeName": type_name,
                "CallReceivedTime": epoch_ms(received_at),
                "Location": location,
                "LocationDescription": None,
                "CityName": city,
            }
        }

    return _make


@pytest.fixture
def sample_feed_payload(make_feature) -> dict[str, Any]:
    """Sample active dispatch response from the ArcGIS FeatureServer."""
    return {
        "objectIdFieldName": "ObjectId",
        "features": [
            make_feature(1, "ASSAULT/FIGHT", "2600 8TH AVE S"),
            make_feature(2, "BURGLARY - RESIDENCE", "100 BROADWAY"),
            make_feature(3, "WIRES DOWN", "CHARLOTTE AVE / 28TH AVE N", "NASHVILLE"),
        ],
    }


@pytest.fixture
def mock_feed_client() -> MagicMock:
    """Feed client whose fetch_active is an AsyncMock."""
    client = MagicMock()
    client.fetch_active = AsyncMock()
    return client


@pytest.fixture
def mock_publisher() -> MagicMock:
    """Publisher that records published text."""
    publisher = MagicMock()
    publisher.publish = AsyncMock(return_value=None)
    return publisher
