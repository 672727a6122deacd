"""
Unit tests for Dependency Injection providers.

Validates that:
- Repositories and the rate limiter are scoped to the authenticated owner
- Gemini is created lazily and cached on app.state
- Lifespan-owned collaborators are read from app.state
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from amy.api.dependencies import (
    get_budget_advisor,
    get_gemini_service,
    get_notification_service,
    get_rate_limiter,
    get_subscription_repository,
    get_task_runner,
    get_user_settings_repository,
)
from amy.infrastructure.services.budget_advisor import BudgetAdvisor
from tests.factories import TEST_USER_ID


def _request(**state):
    return SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(**state)))


class TestOwnerScopedProviders:

    def test_repositories_are_bound_to_the_owner(self):
        session = MagicMock()

        subs = get_subscription_repository(session, TEST_USER_ID)
        settings = get_user_settings_repository(session, TEST_USER_ID)

        assert subs.owner_id == TEST_USER_ID
        assert subs.session is session
        assert settings.owner_id == TEST_USER_ID

    def test_rate_limiter_uses_configured_limit(self):
        config = MagicMock(ai_rate_limit_per_hour=5, ai_request_retention_hours=48)
        with patch("amy.api.dependencies.get_settings", return_value=config):
            limiter = get_rate_limiter(MagicMock(), TEST_USER_ID)

        assert limiter.limit == 5
        assert limiter.retention.total_seconds() == 48 * 3600
        assert limiter.owner_id == TEST_USER_ID


class TestAppStateProviders:

    def test_gemini_is_created_once(self):
        request = _request()
        with patch("amy.api.dependencies.GeminiService.from_settings") as from_settings:
            from_settings.return_value = MagicMock()

            first = get_gemini_service(request)
            second = get_gemini_service(request)

        assert first is second
        from_settings.assert_called_once()

    def test_existing_gemini_is_reused(self):
        existing = MagicMock()
        assert get_gemini_service(_request(gemini_service=existing)) is existing

    def test_budget_advisor_wraps_gemini(self):
        assert isinstance(get_budget_advisor(MagicMock()), BudgetAdvisor)

    def test_lifespan_collaborators(self):
        runner, notifications = MagicMock(), MagicMock()
        request = _request(task_runner=runner, notification_service=notifications)

        assert get_task_runner(request) is runner
        assert get_notification_service(request) is notifications
