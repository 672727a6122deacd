"""
Amy - FastAPI Application

Main entry point for the subscription tracker API.
Provides subscription CRUD, dashboard stats, exports, budget settings,
AI-assisted parsing and budget suggestions, and notification emails.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from amy.config.settings import settings
from amy.infrastructure.db.database import close_db, get_session_context, init_db
from amy.infrastructure.email.resend_client import ResendEmailClient
from amy.infrastructure.exceptions import (
    AmyError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from amy.infrastructure.identity.user_directory import SupabaseUserDirectory
from amy.infrastructure.services.notification_service import NotificationService
from amy.infrastructure.tasks import BackgroundTaskRunner

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

SHUTDOWN_DRAIN_SECONDS = 10.0


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info(f"Amy backend starting in {settings.environment} mode...")

    if settings.database_url:
        try:
            await init_db()
            logger.info("Database connection pool initialized")
        except Exception as e:
            logger.warning(f"Database initialization skipped: {e}")

    email_client = ResendEmailClient(settings.resend_api_key, base_url=settings.resend_api_url)
    if not email_client.configured:
        logger.warning("RESEND_API_KEY is not set; notification emails will not be sent")

    app.state.task_runner = BackgroundTaskRunner()
    app.state.email_client = email_client
    app.state.notification_service = NotificationService(
        email_client=email_client,
        user_directory=SupabaseUserDirectory(),
        session_scope=get_session_context,
        settings=settings,
    )

    yield

    await app.state.task_runner.drain(timeout=SHUTDOWN_DRAIN_SECONDS)
    await email_client.aclose()

    if settings.database_url:
        try:
            await close_db()
            logger.info("Database connection pool closed")
        except Exception as e:
            logger.warning(f"Database shutdown error: {e}")

    logger.info("Amy backend shutting down...")


app = FastAPI(
    title="Amy",
    description="Subscription tracker with renewal reminders and budget alerts",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.debug,
)

# CORS configuration from Settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Exception Handlers
# ============================================================================

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content=exc.to_dict())


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content=exc.to_dict())


@app.exception_handler(RateLimitError)
async def rate_limit_error_handler(request: Request, exc: RateLimitError):
    """429 with the limit state in response headers."""
    return JSONResponse(status_code=429, content=exc.to_dict(), headers=exc.headers())


@app.exception_handler(AmyError)
async def general_error_handler(request: Request, exc: AmyError):
    """Handle all other application errors."""
    logger.error(f"{exc.__class__.__name__}: {exc.message}", exc_info=exc.original_error)
    return JSONResponse(status_code=500, content=exc.to_dict())


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "amy"}


@app.get("/")
async def root():
    return {
        "message": "Amy API",
        "version": "1.0.0",
        "docs": "/docs",
    }


# ============================================================================
# Routers
# ============================================================================

from amy.api.routes import ai, subscriptions, user_settings, webhooks  # noqa: E402

app.include_router(subscriptions.router, prefix="/api", tags=["Subscriptions"])
app.include_router(user_settings.router, prefix="/api", tags=["User Settings"])
app.include_router(ai.router, prefix="/api", tags=["AI"])
app.include_router(webhooks.router, prefix="/api", tags=["Webhooks"])
