"""
Spending Aggregator

Reduces a user's subscriptions into monthly/yearly totals and per-category
monthly spending. Accumulation uses unrounded Decimals; values are rounded to
two places only when building report models.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional

from pydantic import Field

from amy.domain.billing import is_due_in_window
from amy.domain.subscription import BillingCycle, CamelModel, Subscription


UNCATEGORIZED = "Uncategorized"
MONTHS_PER_YEAR = Decimal(12)
CENT = Decimal("0.01")


def round_money(value: Decimal) -> float:
    """Round to cents for reporting."""
    return float(Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


@dataclass
class SpendingTotals:
    """Unrounded aggregates over the active subscriptions."""
    total_monthly: Decimal = Decimal(0)
    total_yearly_raw: Decimal = Decimal(0)
    active_count: int = 0
    by_category: Dict[str, Decimal] = field(default_factory=dict)

    @property
    def total_yearly(self) -> Decimal:
        """Annualized spend: monthly costs x 12 plus yearly costs once."""
        return self.total_monthly * MONTHS_PER_YEAR + self.total_yearly_raw


def monthly_equivalent(subscription: Subscription) -> Decimal:
    if subscription.billing_cycle == BillingCycle.YEARLY:
        return Decimal(subscription.cost) / MONTHS_PER_YEAR
    return Decimal(subscription.cost)


def aggregate_spending(subscriptions: Iterable[Subscription]) -> SpendingTotals:
    totals = SpendingTotals()
    for sub in subscriptions:
        if not sub.is_active:
            continue
        totals.active_count += 1
        cost = Decimal(sub.cost)
        if sub.billing_cycle == BillingCycle.MONTHLY:
            totals.total_monthly += cost
        else:
            totals.total_yearly_raw += cost

        category = sub.category or UNCATEGORIZED
        totals.by_category[category] = (
            totals.by_category.get(category, Decimal(0)) + monthly_equivalent(sub)
        )
    return totals


# =============================================================================
# Report models
# =============================================================================

class CategorySpending(CamelModel):
    category: str
    monthly_spending: float


class UpcomingRenewalItem(CamelModel):
    id: int
    name: str
    cost: float
    billing_cycle: BillingCycle
    next_billing_date: date
    category: Optional[str] = None


class UpcomingRenewals(CamelModel):
    next_7_days: int = Field(alias="next7Days")
    next_30_days: int = Field(alias="next30Days")
    items: List[UpcomingRenewalItem]


def category_breakdown(totals: SpendingTotals) -> List[CategorySpending]:
    """Per-category monthly spending, largest first."""
    rows = [
        CategorySpending(category=category, monthly_spending=round_money(amount))
        for category, amount in totals.by_category.items()
    ]
    return sorted(rows, key=lambda row: row.monthly_spending, reverse=True)


def upcoming_renewals(
    subscriptions: Iterable[Subscription],
    today: Optional[date] = None,
) -> UpcomingRenewals:
    subs = list(subscriptions)
    within_7 = sorted(
        (sub for sub in subs if is_due_in_window(sub, 7, today)),
        key=lambda sub: sub.next_billing_date,
    )
    within_30 = [sub for sub in subs if is_due_in_window(sub, 30, today)]

    return UpcomingRenewals(
        next_7_days=len(within_7),
        next_30_days=len(within_30),
        items=[
            UpcomingRenewalItem(
                id=sub.id,
                name=sub.name,
                cost=round_money(sub.cost),
                billing_cycle=sub.billing_cycle,
                next_billing_date=sub.next_billing_date,
                category=sub.category,
            )
            for sub in within_7
        ],
    )
