"""
AI Rate Limiter

Hourly allowance shared by every AI endpoint, counted from the ``ai_requests``
log. The check fails open and bookkeeping failures are only logged.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from amy.domain.dates import ensure_utc, utc_now
from amy.infrastructure.db.repositories.ai_request_repository import AIRequestRepository


logger = logging.getLogger(__name__)

RATE_LIMIT_PER_HOUR = 25
WINDOW = timedelta(hours=1)
CLEANUP_AGE_HOURS = 24


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    limit: int
    reset_at: datetime

    @property
    def retry_after_seconds(self) -> int:
        return max(0, int((self.reset_at - utc_now()).total_seconds()))


class RateLimiter:
    """Rate limit checks for one owner, bound to the request session."""

    def __init__(
        self,
        session: AsyncSession,
        owner_id: str,
        limit: int = RATE_LIMIT_PER_HOUR,
        retention_hours: int = CLEANUP_AGE_HOURS,
    ):
        self.owner_id = owner_id
        self.limit = limit
        self.retention = timedelta(hours=retention_hours)
        self._session = session
        self._repo = AIRequestRepository(session, owner_id)

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def check(self, endpoint: str, now: Optional[datetime] = None) -> RateLimitResult:
        """Count requests in the trailing hour; ``reset_at`` is when the oldest leaves it."""
        now = ensure_utc(now or utc_now())
        window_start = now - WINDOW

        try:
            count = await self._repo.count_since(window_start)
            oldest = await self._repo.oldest_since(window_start) if count else None
        except SQLAlchemyError as e:
            logger.error(f"Error checking rate limit for user {self.owner_id} ({endpoint}): {e}")
            await self._session.rollback()
            return RateLimitResult(
                allowed=True,
                remaining=self.limit,
                limit=self.limit,
                reset_at=now + WINDOW,
            )

        await self.cleanup(now)

        reset_at = ensure_utc(oldest) + WINDOW if oldest else now + WINDOW
        return RateLimitResult(
            allowed=count < self.limit,
            remaining=max(0, self.limit - count),
            limit=self.limit,
            reset_at=reset_at,
        )

    async def record(self, endpoint: str, input_length: Optional[int] = None) -> None:
        try:
            await self._repo.record(endpoint, input_length)
        except SQLAlchemyError as e:
            logger.error(f"Error recording AI request for user {self.owner_id} ({endpoint}): {e}")
            await self._session.rollback()

    async def cleanup(self, now: Optional[datetime] = None) -> int:
        """Delete this owner's records older than the retention period."""
        cutoff = ensure_utc(now or utc_now()) - self.retention
        try:
            return await self._repo.delete_older_than(cutoff)
        except SQLAlchemyError as e:
            logger.error(f"Error cleaning up old AI request records for user {self.owner_id}: {e}")
            await self._session.rollback()
            return 0
