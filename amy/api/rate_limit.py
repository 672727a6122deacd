"""
Rate limiting for AI endpoints.

The hourly allowance is shared by every AI endpoint and counted per user.
"""

import logging
from typing import Callable

from amy.api.dependencies import RateLimiterDep
from amy.infrastructure.exceptions import RateLimitError
from amy.infrastructure.services.rate_limiter import RateLimiter


logger = logging.getLogger(__name__)


def ai_rate_limit(endpoint: str) -> Callable:
    """
    Build a dependency that rejects the request once the allowance is used.

    Usage:
        @router.post("/parse-subscription")
        async def parse(limiter: RateLimiter = Depends(ai_rate_limit("parse-subscription"))):
            ...

    Raises:
        RateLimitError: 429 with ``Retry-After`` and ``X-RateLimit-*`` headers
    """

    async def check_rate_limit(limiter: RateLimiterDep) -> RateLimiter:
        result = await limiter.check(endpoint)
        if not result.allowed:
            logger.warning(
                f"Rate limit exceeded for user {limiter.owner_id} on {endpoint} "
                f"({result.limit} requests per hour)"
            )
            raise RateLimitError(
                "Rate limit exceeded",
                retry_after=result.retry_after_seconds,
                limit=result.limit,
                remaining=result.remaining,
                reset_at=result.reset_at.isoformat(),
            )
        return limiter

    return check_rate_limit
