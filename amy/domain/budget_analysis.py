"""
Budget Analysis

Spending-pattern analysis feeding AI budget recommendations, and the
deterministic rules applied around the model's answer: confidence level,
starter suggestion, yearly sanity clamp, and the fallback used when the model
call fails.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Literal, Optional

from pydantic import Field

from amy.domain.dates import add_months, ensure_utc, utc_now
from amy.domain.spending import (
    CategorySpending,
    aggregate_spending,
    category_breakdown,
    round_money,
)
from amy.domain.subscription import CamelModel, Subscription


Confidence = Literal["high", "medium", "low"]
SpendingTrend = Literal["increasing", "decreasing", "stable", "unknown"]

TOP_CATEGORIES = 5
YEARLY_MIN_FACTOR = 10
YEARLY_MAX_FACTOR = 14
YEARLY_CORRECTION_BUFFER = Decimal("1.15")
FALLBACK_BUFFER = Decimal("1.2")
STARTER_MONTHLY_BUDGET = 50


@dataclass
class SpendingAnalysis:
    total_monthly: float = 0.0
    total_yearly: float = 0.0
    active_count: int = 0
    average_cost: float = 0.0
    category_breakdown: Dict[str, float] = field(default_factory=dict)
    highest_spending_categories: List[CategorySpending] = field(default_factory=list)
    has_historical_data: bool = False
    spending_trend: SpendingTrend = "unknown"


def analyze_spending_patterns(
    subscriptions: Iterable[Subscription],
    now: Optional[datetime] = None,
) -> SpendingAnalysis:
    now = now or utc_now()
    active = [sub for sub in subscriptions if sub.is_active]
    totals = aggregate_spending(active)

    one_month_ago = add_months(now.date(), -1)
    three_months_ago = add_months(now.date(), -3)

    def created_on(sub: Subscription):
        return ensure_utc(sub.created_at).date() if sub.created_at else now.date()

    trend: SpendingTrend = "unknown"
    if active:
        recent = [sub for sub in active if created_on(sub) >= three_months_ago]
        trend = "increasing" if len(recent) / len(active) > 0.5 else "stable"

    average = totals.total_monthly / len(active) if active else Decimal(0)

    return SpendingAnalysis(
        total_monthly=round_money(totals.total_monthly),
        total_yearly=round_money(totals.total_yearly),
        active_count=len(active),
        average_cost=round_money(average),
        category_breakdown={k: float(v) for k, v in totals.by_category.items()},
        highest_spending_categories=category_breakdown(totals)[:TOP_CATEGORIES],
        has_historical_data=any(created_on(sub) < one_month_ago for sub in active),
        spending_trend=trend,
    )


def prepare_analysis_context(
    analysis: SpendingAnalysis,
    monthly_budget: Optional[Decimal],
    yearly_budget: Optional[Decimal],
    currency: str,
) -> str:
    """Plain-text summary of the analysis embedded in the model prompt."""
    parts = [
        "Current Spending Analysis:\n"
        f"- Monthly spending: {analysis.total_monthly} {currency}\n"
        f"- Yearly spending: {analysis.total_yearly} {currency}\n"
        f"- Active subscriptions: {analysis.active_count}\n"
        f"- Average subscription cost: {analysis.average_cost} {currency}/month"
    ]

    if analysis.highest_spending_categories:
        lines = "\n".join(
            f"- {row.category}: {row.monthly_spending:.2f} {currency}/month"
            for row in analysis.highest_spending_categories
        )
        parts.append(f"\nTop Spending Categories:\n{lines}")

    if monthly_budget or yearly_budget:
        lines = []
        if monthly_budget:
            lines.append(f"- Monthly: {monthly_budget} {currency}")
        if yearly_budget:
            lines.append(f"- Yearly: {yearly_budget} {currency}")
        parts.append("\nExisting Budgets:\n" + "\n".join(lines))

    parts.append(
        "\nData Quality:\n"
        f"- Historical data available: {'Yes' if analysis.has_historical_data else 'No'}\n"
        f"- Spending trend: {analysis.spending_trend}"
    )
    return "\n".join(parts)


# =============================================================================
# Recommendations
# =============================================================================

class BudgetRecommendation(CamelModel):
    """Budget suggestion returned to the client (and requested from the model)."""
    suggested_monthly_budget: float = Field(..., gt=0, description="Suggested monthly budget amount")
    suggested_yearly_budget: float = Field(..., gt=0, description="Suggested yearly budget amount")
    reasoning: str = Field(..., min_length=50, description="Why these budgets were recommended")
    confidence: Confidence = Field(..., description="Confidence based on data quality")
    insights: List[str] = Field(..., min_length=1, description="Actionable spending insights")


def assess_confidence(analysis: SpendingAnalysis) -> Confidence:
    if analysis.has_historical_data and analysis.active_count >= 3:
        return "high"
    if analysis.active_count < 2:
        return "low"
    return "medium"


def starter_recommendation() -> BudgetRecommendation:
    """Suggestion for a user with no active subscriptions."""
    return BudgetRecommendation(
        suggested_monthly_budget=STARTER_MONTHLY_BUDGET,
        suggested_yearly_budget=STARTER_MONTHLY_BUDGET * 12,
        reasoning=(
            "You don't have any active subscriptions yet. We've suggested a conservative "
            "starting budget. You can adjust this as you add subscriptions."
        ),
        confidence="low",
        insights=[
            "Start with a conservative budget and adjust as you add subscriptions",
            "Consider tracking your first few subscriptions to understand your spending patterns",
        ],
    )


def clamp_yearly_budget(recommendation: BudgetRecommendation) -> BudgetRecommendation:
    """Recompute the yearly suggestion when it is outside [monthly x 10, monthly x 14]."""
    monthly = Decimal(str(recommendation.suggested_monthly_budget))
    yearly = Decimal(str(recommendation.suggested_yearly_budget))

    if monthly * YEARLY_MIN_FACTOR <= yearly <= monthly * YEARLY_MAX_FACTOR:
        return recommendation

    corrected = round_money(monthly * 12 * YEARLY_CORRECTION_BUFFER)
    return recommendation.model_copy(update={"suggested_yearly_budget": corrected})


def fallback_recommendation(analysis: SpendingAnalysis, currency: str) -> BudgetRecommendation:
    """Deterministic suggestion used when the model call fails."""
    yearly_spend = Decimal(str(analysis.total_yearly))
    # yearly-only users have no monthly spend; fall back to the annual spend spread over 12
    monthly_spend = Decimal(str(analysis.total_monthly)) or yearly_spend / 12
    monthly = math.ceil(monthly_spend * FALLBACK_BUFFER)
    yearly = math.ceil(yearly_spend * FALLBACK_BUFFER)

    if analysis.highest_spending_categories:
        top = analysis.highest_spending_categories[0]
        category_insight = (
            f"Your highest spending category is {top.category} at "
            f"{top.monthly_spending:.2f} {currency}/month"
        )
    else:
        category_insight = "Consider categorizing your subscriptions for better insights"

    return BudgetRecommendation(
        suggested_monthly_budget=monthly,
        suggested_yearly_budget=yearly,
        reasoning=(
            f"Based on your current monthly spending of {analysis.total_monthly} {currency}, "
            f"we suggest a monthly budget of {monthly} {currency} (20% buffer for new "
            f"subscriptions or price increases). Your yearly budget of {yearly} {currency} "
            "accounts for your current annual spending plus a buffer."
        ),
        confidence="medium",
        insights=[
            f"You're currently spending {analysis.total_monthly} {currency}/month on "
            f"{analysis.active_count} active subscriptions",
            category_insight,
        ],
    )
