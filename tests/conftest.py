"""Pytest configuration and shared fixtures.

Usage Guide:
- For ORM model tests: use the db_session fixture and tests.factories helpers
- For service tests: use session_factory (services open their own sessions)
- For GitHub API tests: import payload factories from tests.factories
"""

from datetime import UTC, datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from github_issue_cache.db.engine import build_engine, build_session_factory
from github_issue_cache.db.models import Base
from github_issue_cache.github.credentials import StaticCredentialStore
from github_issue_cache.schemas.repository import RepositoryRef

# -----------------------------------------------------------------------------
# Test Timeline Constants
#
# Define a consistent "test epoch" for deterministic date matching across tests.
# All hardcoded dates should reference these constants for consistency.
# -----------------------------------------------------------------------------

# Base dates (datetime objects for Pydantic/ORM)
JAN_10 = datetime(2024, 1, 10, 9, 0, 0, tzinfo=UTC)   # Oldest issue opened
JAN_12 = datetime(2024, 1, 12, 16, 0, 0, tzinfo=UTC)  # Oldest issue closed
JAN_15 = datetime(2024, 1, 15, 10, 0, 0, tzinfo=UTC)  # Newer issue opened
JAN_16 = datetime(2024, 1, 16, 14, 0, 0, tzinfo=UTC)  # Newer issue updated
JAN_20 = datetime(2024, 1, 20, 16, 0, 0, tzinfo=UTC)  # Latest activity

# ISO 8601 strings (for GitHub API mocks)
JAN_10_ISO = "2024-01-10T09:00:00Z"
JAN_12_ISO = "2024-01-12T16:00:00Z"
JAN_15_ISO = "2024-01-15T10:00:00Z"
JAN_16_ISO = "2024-01-16T14:00:00Z"
JAN_20_ISO = "2024-01-20T16:00:00Z"

# -----------------------------------------------------------------------------
# Identity Constants
# -----------------------------------------------------------------------------
USER_ID = 1
OTHER_USER_ID = 2
ENTERPRISE_DOMAIN = "github.example.com"
TEST_TOKEN = "ghp_" + "a" * 36


# -----------------------------------------------------------------------------
# Database Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
async def test_engine():
    """Create an in-memory SQLite engine for tests.

    Each test gets a fresh database with all tables created. The engine is
    built like production (one shared connection, foreign keys enabled).
    """
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine, configured like production."""
    return build_session_factory(test_engine)


@pytest.fixture
async def db_session(session_factory):
    """Create an async session with auto-rollback.

    Changes are rolled back after each test to ensure isolation.
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


# -----------------------------------------------------------------------------
# Identity Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def repo_ref() -> RepositoryRef:
    """The repository most tests sync and search."""
    return RepositoryRef(user_id=USER_ID, owner="octo-org", name="widgets")


@pytest.fixture
def credentials() -> StaticCredentialStore:
    """Credential store with a github.com token for USER_ID."""
    return StaticCredentialStore({(USER_ID, "github.com"): TEST_TOKEN})


@pytest.fixture
def empty_credentials() -> StaticCredentialStore:
    """Credential store with no tokens at all."""
    return StaticCredentialStore()


# -----------------------------------------------------------------------------
# Utility Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def utc_now() -> datetime:
    """Current UTC datetime for tests."""
    return datetime.now(UTC)
