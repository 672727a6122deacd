"""
Tests for the hourly AI rate limiter against in-memory SQLite.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import SQLAlchemyError

from amy.infrastructure.db.models import AIRequestModel
from amy.infrastructure.db.repositories import AIRequestRepository
from amy.infrastructure.services.rate_limiter import RateLimiter
from tests.factories import OTHER_USER_ID, TEST_USER_ID


ENDPOINT = "parse-subscription"


async def _seed(session, user_id, *ages):
    for age in ages:
        session.add(
            AIRequestModel(
                user_id=user_id,
                endpoint=ENDPOINT,
                requested_at=datetime.now(timezone.utc) - age,
            )
        )
    await session.flush()


@pytest.mark.asyncio
async def test_fresh_user_is_allowed(session):
    limiter = RateLimiter(session, TEST_USER_ID)
    now = datetime.now(timezone.utc)

    result = await limiter.check(ENDPOINT, now)

    assert result.allowed
    assert result.remaining == 25
    assert result.reset_at == now + timedelta(hours=1)


@pytest.mark.asyncio
async def test_limit_is_enforced_after_25_requests(session):
    limiter = RateLimiter(session, TEST_USER_ID)
    for _ in range(24):
        await limiter.record(ENDPOINT, 10)

    assert (await limiter.check(ENDPOINT)).allowed

    await limiter.record(ENDPOINT, 10)
    result = await limiter.check(ENDPOINT)

    assert not result.allowed
    assert result.remaining == 0
    assert 3500 < result.retry_after_seconds <= 3600


@pytest.mark.asyncio
async def test_window_resets_when_oldest_request_ages_out(session):
    await _seed(session, TEST_USER_ID, timedelta(minutes=50), timedelta(minutes=10))
    now = datetime.now(timezone.utc)

    result = await RateLimiter(session, TEST_USER_ID).check(ENDPOINT, now)

    assert result.remaining == 23
    assert now + timedelta(minutes=9) < result.reset_at < now + timedelta(minutes=11)


@pytest.mark.asyncio
async def test_requests_outside_the_window_do_not_count(session):
    await _seed(session, TEST_USER_ID, timedelta(hours=2))
    await _seed(session, OTHER_USER_ID, timedelta(minutes=5))

    result = await RateLimiter(session, TEST_USER_ID).check(ENDPOINT)

    assert result.remaining == 25


@pytest.mark.asyncio
async def test_check_cleans_up_only_this_owners_old_records(session):
    await _seed(session, TEST_USER_ID, timedelta(hours=25), timedelta(hours=2))
    await _seed(session, OTHER_USER_ID, timedelta(hours=25))

    await RateLimiter(session, TEST_USER_ID).check(ENDPOINT)

    long_ago = datetime.now(timezone.utc) - timedelta(days=7)
    assert await AIRequestRepository(session, TEST_USER_ID).count_since(long_ago) == 1
    assert await AIRequestRepository(session, OTHER_USER_ID).count_since(long_ago) == 1


@pytest.mark.asyncio
async def test_configurable_limit(session):
    limiter = RateLimiter(session, TEST_USER_ID, limit=1)
    await limiter.record(ENDPOINT)
    assert not (await limiter.check(ENDPOINT)).allowed


@pytest.mark.asyncio
async def test_check_fails_open():
    session = MagicMock()
    session.execute = AsyncMock(side_effect=SQLAlchemyError("connection lost"))
    session.rollback = AsyncMock()

    result = await RateLimiter(session, TEST_USER_ID).check(ENDPOINT)

    assert result.allowed
    assert result.remaining == 25
    session.rollback.assert_awaited()


@pytest.mark.asyncio
async def test_record_failure_is_swallowed():
    session = MagicMock()
    session.flush = AsyncMock(side_effect=SQLAlchemyError("connection lost"))
    session.rollback = AsyncMock()

    await RateLimiter(session, TEST_USER_ID).record(ENDPOINT, 12)
    session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_allowed_again_once_oldest_request_leaves_the_window(session):
    await _seed(session, TEST_USER_ID, timedelta(minutes=59), *[timedelta(minutes=10)] * 24)
    limiter = RateLimiter(session, TEST_USER_ID)
    now = datetime.now(timezone.utc)

    assert not (await limiter.check(ENDPOINT, now)).allowed

    later = await limiter.check(ENDPOINT, now + timedelta(minutes=2))
    assert later.allowed
    assert later.remaining == 1
