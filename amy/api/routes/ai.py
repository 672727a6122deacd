"""
AI API Routes

Free-text subscription parsing and budget recommendations, both counted
against the shared hourly AI allowance.
"""

import logging

from fastapi import APIRouter, Depends

from amy.api.dependencies import (
    BudgetAdvisorDep,
    GeminiServiceDep,
    SubscriptionRepoDep,
    UserSettingsRepoDep,
)
from amy.api.rate_limit import ai_rate_limit
from amy.domain.ai_parsing import (
    ParseSubscriptionRequest,
    ParseSubscriptionResponse,
    missing_fields,
)
from amy.domain.budget_analysis import BudgetRecommendation
from amy.domain.content_validation import validate_ai_input
from amy.domain.dates import today_local
from amy.infrastructure.exceptions import ValidationError
from amy.infrastructure.services.rate_limiter import RateLimiter


logger = logging.getLogger(__name__)

router = APIRouter()

PARSE_ENDPOINT = "parse-subscription"
BUDGET_ENDPOINT = "budget-recommendations"


@router.post("/ai/parse-subscription", response_model=ParseSubscriptionResponse)
async def parse_subscription(
    payload: ParseSubscriptionRequest,
    gemini: GeminiServiceDep,
    limiter: RateLimiter = Depends(ai_rate_limit(PARSE_ENDPOINT)),
):
    """
    Turn a sentence like "Netflix $15.99 monthly" into subscription fields.

    Raises:
        ValidationError: rejected input, or a parsed cost that is not positive
        AIServiceError: the model call failed
    """
    check = validate_ai_input(payload.text)
    if not check.valid:
        raise ValidationError(check.error)

    text = payload.text.strip()
    await limiter.record(PARSE_ENDPOINT, len(text))
    await limiter.session.commit()

    parsed = await gemini.parse_subscription(text, today_local())
    if parsed.cost is not None and parsed.cost <= 0:
        raise ValidationError("Cost must be a positive number")

    return ParseSubscriptionResponse(data=parsed, missing_fields=missing_fields(parsed))


@router.post("/ai/budget-recommendations", response_model=BudgetRecommendation)
async def budget_recommendations(
    repo: SubscriptionRepoDep,
    settings_repo: UserSettingsRepoDep,
    advisor: BudgetAdvisorDep,
    limiter: RateLimiter = Depends(ai_rate_limit(BUDGET_ENDPOINT)),
):
    """Suggested monthly and yearly budgets with reasoning and insights."""
    await limiter.record(BUDGET_ENDPOINT)
    await limiter.session.commit()

    subscriptions = await repo.list_active()
    user_settings = await settings_repo.get()
    return await advisor.recommend(subscriptions, user_settings)
