"""Pytest configuration and fixtures for FinOpsGuard tests."""

from datetime import date, timedelta
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from finopsguard.core.config import Settings
from finopsguard.main import create_app
from finopsguard.providers.factory import build_provider_set
from finopsguard.schemas.credentials import AssumedCredentials
from finopsguard.services.scan_storage import InMemoryScanStorage
from tests.fakes import FIXED_NOW


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        APP_ENV="test",
        MOCK_AWS=False,
        AWS_ACCESS_KEY_ID="",
        AWS_SECRET_ACCESS_KEY="",
        AWS_SESSION_TOKEN="",
        SCAN_TIMEOUT_SECONDS=5.0,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def mock_settings(test_settings: Settings) -> Settings:
    return test_settings.model_copy(update={"MOCK_AWS": True})


@pytest.fixture
def credentials() -> AssumedCredentials:
    return AssumedCredentials(
        access_key_id="ASIATESTACCESSKEY",
        secret_access_key="test-secret",
        session_token="test-session-token",
        expiration=FIXED_NOW + timedelta(hours=1),
    )


@pytest.fixture
def today() -> date:
    return FIXED_NOW.date()


@pytest.fixture
async def async_client(mock_settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against an app wired with mock providers and fresh storage."""
    app = create_app(
        settings=mock_settings,
        provider_set=build_provider_set(mock_settings),
        storage=InMemoryScanStorage(),
    )
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
