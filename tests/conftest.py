"""Shared test fixtures."""

import os

# Settings() requires JWT_SECRET; set it before any src module is imported
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")

from datetime import UTC, datetime  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.main import app  # noqa: E402
from src.om_common.datetime_utils import FixedClock  # noqa: E402

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(T0)


@pytest.fixture
def db() -> AsyncMock:
    """Stand-in AsyncSession: commit/rollback are recorded, never executed."""
    return AsyncMock()
