"""
Test configuration and fixtures for Amy.

Provides shared fixtures for unit and integration tests.
"""

import os

# Settings are read at import time; keep tests independent of the shell.
os.environ["DATABASE_URL"] = ""
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-at-least-32-characters")
os.environ.setdefault("RESEND_WEBHOOK_SECRET", "whsec_test")

from contextlib import asynccontextmanager
from datetime import date, timedelta
from decimal import Decimal
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from amy.domain.subscription import BillingCycle, SubscriptionStatus
from tests.factories import TEST_USER_ID, make_subscription


# =============================================================================
# App Fixtures
# =============================================================================

@pytest.fixture
def app():
    """Get the FastAPI application with dependency overrides cleared afterwards."""
    from amy.main import app
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def mock_user_id():
    return TEST_USER_ID


@pytest.fixture
def auth_headers(app, mock_user_id):
    """Authenticate every request as ``mock_user_id``."""
    from amy.api.dependencies import get_current_user_id

    app.dependency_overrides[get_current_user_id] = lambda: mock_user_id
    return {"Authorization": "Bearer test-token"}


@pytest.fixture
def client(app):
    """Synchronous test client; the lifespan runs so ``app.state`` is populated."""
    with TestClient(app) as c:
        yield c


# =============================================================================
# Mock Fixtures
# =============================================================================

@pytest.fixture
def mock_subscription_repo(mock_user_id):
    repo = MagicMock()
    repo.owner_id = mock_user_id
    repo.session = MagicMock()
    repo.session.commit = AsyncMock()
    repo.session.rollback = AsyncMock()
    repo.list_all = AsyncMock(return_value=[])
    repo.list_active = AsyncMock(return_value=[])
    repo.list_by_ids = AsyncMock(return_value=[])
    repo.get = AsyncMock(return_value=None)
    repo.create = AsyncMock()
    repo.update = AsyncMock()
    repo.delete = AsyncMock(return_value=True)
    repo.set_next_billing_date = AsyncMock()
    repo.set_next_billing_dates = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def mock_settings_repo():
    from amy.domain.user_settings import UserSettings

    repo = MagicMock()
    repo.session = MagicMock()
    repo.session.commit = AsyncMock()
    repo.get = AsyncMock(return_value=UserSettings())
    repo.save = AsyncMock(return_value=UserSettings())
    return repo


@pytest.fixture
def mock_notification_service():
    """Mock for NotificationService."""
    mock = MagicMock()
    mock.send_due_reminders = AsyncMock(return_value=0)
    mock.send_price_change = AsyncMock(return_value=True)
    mock.check_and_send_budget_alerts = AsyncMock(return_value=0)
    return mock


@pytest.fixture
def mock_gemini_service():
    """Mock for GeminiService."""
    mock = MagicMock()
    mock.parse_subscription = AsyncMock()
    mock.suggest_budget = AsyncMock()
    return mock


# =============================================================================
# Database Fixtures (in-memory SQLite)
# =============================================================================

@pytest.fixture
async def engine():
    import amy.infrastructure.db.models  # noqa: F401  (registers tables)

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def session_scope(session_factory):
    """Stand-in for ``get_session_context`` bound to the test engine."""

    @asynccontextmanager
    async def scope():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return scope


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def today():
    return date(2026, 10, 17)


@pytest.fixture
def sample_subscriptions(today):
    """A monthly, a yearly and a cancelled subscription."""
    return [
        make_subscription(id=1, next_billing_date=today + timedelta(days=3)),
        make_subscription(
            id=2,
            name="Adobe Creative Cloud",
            cost=Decimal("120.00"),
            billing_cycle=BillingCycle.YEARLY,
            next_billing_date=today + timedelta(days=20),
            category="Software",
            icon="adobe",
        ),
        make_subscription(
            id=3,
            name="Old Gym",
            cost=Decimal("40.00"),
            next_billing_date=today - timedelta(days=10),
            category="Fitness",
            status=SubscriptionStatus.CANCELLED,
            icon=None,
        ),
    ]
