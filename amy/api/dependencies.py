"""
API Dependencies

FastAPI dependency injection for authentication, owner-scoped repositories and
the collaborators the lifespan places on ``app.state``.

Security: JWT tokens are verified cryptographically using Supabase JWKS (ES256)
with HS256 fallback via the JWT secret. Never decode without verification.
"""

import logging
from typing import Annotated, Optional

import jwt
from jwt import PyJWKClient
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from amy.config.settings import get_settings
from amy.infrastructure.ai.gemini_service import GeminiService
from amy.infrastructure.db.dependencies import SessionDep
from amy.infrastructure.db.repositories import (
    SubscriptionRepository,
    UserSettingsRepository,
)
from amy.infrastructure.services.budget_advisor import BudgetAdvisor
from amy.infrastructure.services.notification_service import NotificationService
from amy.infrastructure.services.rate_limiter import RateLimiter
from amy.infrastructure.tasks import BackgroundTaskRunner


logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

# PyJWKClient caches keys internally and refreshes them periodically.
_jwks_client: Optional[PyJWKClient] = None


def _get_jwks_client() -> PyJWKClient:
    """Return a singleton PyJWKClient for the Supabase JWKS endpoint."""
    global _jwks_client
    if _jwks_client is None:
        settings = get_settings()
        jwks_url = f"{settings.supabase_url}/auth/v1/.well-known/jwks.json"
        _jwks_client = PyJWKClient(jwks_url, cache_keys=True)
    return _jwks_client


def _decode_with_jwks(token: str, issuer: str) -> dict:
    """Verify JWT using Supabase JWKS endpoint (ES256 asymmetric keys)."""
    signing_key = _get_jwks_client().get_signing_key_from_jwt(token)
    return jwt.decode(
        token,
        signing_key.key,
        algorithms=["ES256"],
        issuer=issuer,
        audience="authenticated",
        options={"require": ["exp", "sub", "iss"]},
    )


def _decode_with_secret(token: str, secret: str, issuer: str) -> dict:
    """Verify JWT using HS256 symmetric secret (legacy Supabase signing)."""
    return jwt.decode(
        token,
        secret,
        algorithms=["HS256"],
        issuer=issuer,
        audience="authenticated",
        options={"require": ["exp", "sub", "iss"]},
    )


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """
    Resolve the request's owner id from a Supabase JWT.

    Tries JWKS (ES256) first, then HS256 with ``SUPABASE_JWT_SECRET``.

    Raises:
        HTTPException 401: token missing, expired, or invalid.
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = credentials.credentials
    settings = get_settings()
    issuer = f"{settings.supabase_url}/auth/v1"

    payload: Optional[dict] = None

    try:
        payload = _decode_with_jwks(token, issuer)
    except (jwt.exceptions.PyJWKClientError, jwt.InvalidTokenError) as jwks_err:
        logger.debug("JWKS verification failed, trying HS256 fallback: %s", jwks_err)

    if payload is None and settings.supabase_jwt_secret:
        try:
            payload = _decode_with_secret(token, settings.supabase_jwt_secret, issuer)
        except jwt.ExpiredSignatureError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired",
            )
        except jwt.InvalidTokenError as e:
            logger.warning("HS256 JWT verification also failed: %s", e)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or unverifiable token",
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing user ID",
        )

    return user_id


CurrentUserDep = Annotated[str, Depends(get_current_user_id)]


# =============================================================================
# Owner-scoped repositories
# =============================================================================

def get_subscription_repository(
    session: SessionDep,
    user_id: CurrentUserDep,
) -> SubscriptionRepository:
    return SubscriptionRepository(session, user_id)


def get_user_settings_repository(
    session: SessionDep,
    user_id: CurrentUserDep,
) -> UserSettingsRepository:
    return UserSettingsRepository(session, user_id)


def get_rate_limiter(session: SessionDep, user_id: CurrentUserDep) -> RateLimiter:
    settings = get_settings()
    return RateLimiter(
        session,
        user_id,
        limit=settings.ai_rate_limit_per_hour,
        retention_hours=settings.ai_request_retention_hours,
    )


SubscriptionRepoDep = Annotated[SubscriptionRepository, Depends(get_subscription_repository)]
UserSettingsRepoDep = Annotated[UserSettingsRepository, Depends(get_user_settings_repository)]
RateLimiterDep = Annotated[RateLimiter, Depends(get_rate_limiter)]


# =============================================================================
# Application collaborators (created in the lifespan)
# =============================================================================

def get_task_runner(request: Request) -> BackgroundTaskRunner:
    return request.app.state.task_runner


def get_notification_service(request: Request) -> NotificationService:
    return request.app.state.notification_service


def get_gemini_service(request: Request) -> GeminiService:
    """Gemini client, created on first use so the API starts without an AI key."""
    service = getattr(request.app.state, "gemini_service", None)
    if service is None:
        service = GeminiService.from_settings(get_settings())
        request.app.state.gemini_service = service
    return service


def get_budget_advisor(gemini: GeminiService = Depends(get_gemini_service)) -> BudgetAdvisor:
    return BudgetAdvisor(gemini)


TaskRunnerDep = Annotated[BackgroundTaskRunner, Depends(get_task_runner)]
NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]
GeminiServiceDep = Annotated[GeminiService, Depends(get_gemini_service)]
BudgetAdvisorDep = Annotated[BudgetAdvisor, Depends(get_budget_advisor)]
