"""
Budget Advisor

Builds AI budget recommendations from a user's subscriptions. The model's
answer always passes through the yearly clamp; a failed model call falls back
to a deterministic suggestion instead of failing the request.
"""

import logging
from datetime import datetime
from typing import Iterable, Optional

from amy.domain.budget_analysis import (
    BudgetRecommendation,
    analyze_spending_patterns,
    assess_confidence,
    clamp_yearly_budget,
    fallback_recommendation,
    prepare_analysis_context,
    starter_recommendation,
)
from amy.domain.subscription import Subscription
from amy.domain.user_settings import UserSettings
from amy.infrastructure.ai.gemini_service import GeminiService
from amy.infrastructure.ai.prompts import build_budget_prompt
from amy.infrastructure.exceptions import AIServiceError, RateLimitError


logger = logging.getLogger(__name__)


class BudgetAdvisor:

    def __init__(self, gemini: GeminiService):
        self._gemini = gemini

    async def recommend(
        self,
        subscriptions: Iterable[Subscription],
        user_settings: UserSettings,
        now: Optional[datetime] = None,
    ) -> BudgetRecommendation:
        analysis = analyze_spending_patterns(subscriptions, now)
        if analysis.active_count == 0:
            return starter_recommendation()

        confidence = assess_confidence(analysis)
        context = prepare_analysis_context(
            analysis,
            user_settings.monthly_budget,
            user_settings.yearly_budget,
            user_settings.currency,
        )
        prompt = build_budget_prompt(
            analysis,
            context,
            user_settings.monthly_budget,
            user_settings.yearly_budget,
            user_settings.currency,
            confidence,
        )

        try:
            recommendation = await self._gemini.suggest_budget(prompt)
        except (AIServiceError, RateLimitError) as e:
            logger.error(f"Budget recommendation generation failed, using fallback: {e.message}")
            return fallback_recommendation(analysis, user_settings.currency)

        return clamp_yearly_budget(recommendation)
