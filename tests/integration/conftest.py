"""API-test fixtures.

The app runs over ASGITransport (no lifespan, so no database connection).
Each test gets a registry built from settings with the shared FakeClock,
and the journal session is an AsyncMock.
"""

from collections.abc import AsyncGenerator, Callable
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from config.settings import settings
from src.main import app
from src.pm_common.database import get_db_session
from src.pm_gateway.auth.jwt_handler import create_access_token
from src.pm_registry.application.runtime import build_registry, get_registry
from src.pm_registry.domain.registry import MarketRegistry


@pytest.fixture
def registry(clock) -> MarketRegistry:
    """Built from settings, as in production, with the test clock."""
    return build_registry(clock)


@pytest.fixture
def journal() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
async def client(registry: MarketRegistry, journal: AsyncMock) -> AsyncGenerator[AsyncClient, None]:
    async def _db() -> AsyncGenerator[AsyncMock, None]:
        yield journal

    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_db_session] = _db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth() -> Callable[[str], dict[str, str]]:
    """Bearer header for an arbitrary account id."""

    def _headers(account_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(account_id)}"}

    return _headers


@pytest.fixture
def owner_headers(auth: Callable[[str], dict[str, str]]) -> dict[str, str]:
    return auth(settings.OWNER_ACCOUNT_ID)
