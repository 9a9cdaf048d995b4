"""Root test fixtures shared across all test types.

Unit tests run against in-memory collaborators from tests.fakes.
Database and HTTP fixtures are in tests/integration/conftest.py.
"""

import os

os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-the-portal-test-suite-000")
# Cheap hashing keeps the suite fast; production uses the defaults
os.environ.setdefault("ARGON2_TIME_COST", "1")
os.environ.setdefault("ARGON2_MEMORY_COST", "1024")
os.environ.setdefault("CREDENTIAL_PROVIDER_TIMEOUT_SECONDS", "2")
os.environ.pop("RESEND_API_KEY", None)

# ruff: noqa: E402 - Imports must be after env var setup
import pytest

from src.portal.core.config import Settings, get_settings
from src.portal.services import NotificationService, PromotionService, SessionManager
from tests.fakes import (
    InMemoryApplicationStore,
    InMemoryCredentialProvider,
    InMemoryProfileStore,
)

# Clear settings cache to ensure test environment variables are picked up
get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest.fixture
def credentials() -> InMemoryCredentialProvider:
    return InMemoryCredentialProvider()


@pytest.fixture
def profiles() -> InMemoryProfileStore:
    return InMemoryProfileStore()


@pytest.fixture
def applications() -> InMemoryApplicationStore:
    return InMemoryApplicationStore()


@pytest.fixture
async def manager(credentials, profiles, settings):
    """A started SessionManager over the in-memory collaborators."""
    session_manager = SessionManager(credentials, profiles, settings)
    await session_manager.start()
    yield session_manager
    session_manager.dispose()


@pytest.fixture
def promotion(credentials, profiles, applications, settings) -> PromotionService:
    return PromotionService(credentials, profiles, applications, settings)


@pytest.fixture
def notifications(applications):
    service = NotificationService(applications)
    yield service
    service.dispose()
