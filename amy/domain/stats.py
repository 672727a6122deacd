"""Dashboard statistics assembled from a user's subscriptions and settings."""

from datetime import date
from typing import Iterable, List, Optional

from amy.domain.budget import BudgetOverview, budget_overview
from amy.domain.spending import (
    CategorySpending,
    UpcomingRenewals,
    aggregate_spending,
    category_breakdown,
    round_money,
    upcoming_renewals,
)
from amy.domain.subscription import CamelModel, Subscription
from amy.domain.user_settings import UserSettings


class SubscriptionStats(CamelModel):
    total_monthly: float
    total_yearly: float
    upcoming_renewals: UpcomingRenewals
    category_breakdown: List[CategorySpending]
    total_active_subscriptions: int
    currency: str
    budget: BudgetOverview


def build_stats(
    subscriptions: Iterable[Subscription],
    user_settings: UserSettings,
    today: Optional[date] = None,
) -> SubscriptionStats:
    subs = list(subscriptions)
    totals = aggregate_spending(subs)
    return SubscriptionStats(
        total_monthly=round_money(totals.total_monthly),
        total_yearly=round_money(totals.total_yearly),
        upcoming_renewals=upcoming_renewals(subs, today),
        category_breakdown=category_breakdown(totals),
        total_active_subscriptions=totals.active_count,
        currency=user_settings.currency,
        budget=budget_overview(
            totals,
            user_settings.monthly_budget,
            user_settings.yearly_budget,
            user_settings.budget_alert_threshold,
            today,
        ),
    )
