"""
Budget Status Engine

Compares aggregated spend with the user's monthly/yearly limits, projects
end-of-period spending, and decides which budget alerts are eligible to send.
"""

import calendar
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Union

from amy.domain.dates import today_local
from amy.domain.notifications import NotificationKind
from amy.domain.spending import SpendingTotals, round_money
from amy.domain.subscription import CamelModel


Number = Union[int, float, Decimal]

DEFAULT_ALERT_THRESHOLD = Decimal(80)
HUNDRED = Decimal(100)


class BudgetStatus(str, Enum):
    UNDER = "under"
    APPROACHING = "approaching"
    EXCEEDED = "exceeded"


class BudgetPeriod(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


STATUS_LABELS = {
    BudgetStatus.UNDER: "Under Budget",
    BudgetStatus.APPROACHING: "Approaching Budget",
    BudgetStatus.EXCEEDED: "Budget Exceeded",
}


def _decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def budget_percentage(spent: Number, budget: Number) -> Decimal:
    return _decimal(spent) / _decimal(budget) * HUNDRED


def check_budget_status(
    spent: Number,
    budget: Optional[Number],
    threshold: Number = DEFAULT_ALERT_THRESHOLD,
) -> Optional[BudgetStatus]:
    """Classify spend against a budget; None when no budget is configured."""
    if not budget:
        return None

    percentage = budget_percentage(spent, budget)
    if percentage >= HUNDRED:
        return BudgetStatus.EXCEEDED
    if percentage >= _decimal(threshold):
        return BudgetStatus.APPROACHING
    return BudgetStatus.UNDER


def format_budget_status(status: Optional[BudgetStatus]) -> str:
    if status is None:
        return "No Budget Set"
    return STATUS_LABELS[status]


@dataclass(frozen=True)
class BudgetPeriodInfo:
    start_date: date
    end_date: date
    days_elapsed: int
    days_remaining: int
    total_days: int


def get_budget_period_info(
    period: BudgetPeriod,
    today: Optional[date] = None,
) -> BudgetPeriodInfo:
    """Calendar month or calendar year containing today."""
    today = today_local(today)
    if BudgetPeriod(period) == BudgetPeriod.MONTHLY:
        start = today.replace(day=1)
        end = today.replace(day=calendar.monthrange(today.year, today.month)[1])
    else:
        start = date(today.year, 1, 1)
        end = date(today.year, 12, 31)

    return BudgetPeriodInfo(
        start_date=start,
        end_date=end,
        days_elapsed=(today - start).days,
        days_remaining=(end - today).days,
        total_days=(end - start).days + 1,
    )


def calculate_projected_spending(
    current_spending: Number,
    days_elapsed: int,
    total_days: int,
) -> Decimal:
    """Linear daily-rate extrapolation to the end of the period."""
    current = _decimal(current_spending)
    if days_elapsed == 0:
        return current
    return current / Decimal(days_elapsed) * Decimal(total_days)


# =============================================================================
# Alert decisions
# =============================================================================

@dataclass(frozen=True)
class BudgetAlert:
    """An alert eligible to be sent, before the dedup gate is consulted."""
    kind: NotificationKind
    period: BudgetPeriod
    spent: Decimal
    budget: Decimal
    percentage: Decimal
    projected: Decimal


def evaluate_budget(
    period: BudgetPeriod,
    spent: Number,
    budget: Optional[Number],
    threshold: Number = DEFAULT_ALERT_THRESHOLD,
    today: Optional[date] = None,
) -> List[BudgetAlert]:
    """Alerts for one budget.

    Approaching/exceeded follow the status. Projected-exceed is added when the
    projection is over budget and the status is not already exceeded.
    """
    status = check_budget_status(spent, budget, threshold)
    if status is None:
        return []

    spent_d = _decimal(spent)
    budget_d = _decimal(budget)
    info = get_budget_period_info(period, today)
    projected = calculate_projected_spending(spent_d, info.days_elapsed, info.total_days)
    percentage = budget_percentage(spent_d, budget_d)

    def alert(kind: NotificationKind) -> BudgetAlert:
        return BudgetAlert(kind, period, spent_d, budget_d, percentage, projected)

    alerts = []
    if status == BudgetStatus.APPROACHING:
        alerts.append(alert(NotificationKind.BUDGET_APPROACHING))
    elif status == BudgetStatus.EXCEEDED:
        alerts.append(alert(NotificationKind.BUDGET_EXCEEDED))

    if projected > budget_d and status != BudgetStatus.EXCEEDED:
        alerts.append(alert(NotificationKind.BUDGET_PROJECTED_EXCEED))
    return alerts


def decide_budget_alerts(
    totals: SpendingTotals,
    monthly_budget: Optional[Number],
    yearly_budget: Optional[Number],
    threshold: Number = DEFAULT_ALERT_THRESHOLD,
    today: Optional[date] = None,
) -> List[BudgetAlert]:
    """Monthly spend vs monthly budget, annualized spend vs yearly budget."""
    return [
        *evaluate_budget(
            BudgetPeriod.MONTHLY, totals.total_monthly, monthly_budget, threshold, today
        ),
        *evaluate_budget(
            BudgetPeriod.YEARLY, totals.total_yearly, yearly_budget, threshold, today
        ),
    ]


# =============================================================================
# Report models
# =============================================================================

class BudgetSnapshot(CamelModel):
    period: BudgetPeriod
    budget: float
    spent: float
    percentage: float
    status: BudgetStatus
    status_label: str
    projected: float


class BudgetOverview(CamelModel):
    monthly: Optional[BudgetSnapshot] = None
    yearly: Optional[BudgetSnapshot] = None


def budget_snapshot(
    period: BudgetPeriod,
    spent: Number,
    budget: Optional[Number],
    threshold: Number = DEFAULT_ALERT_THRESHOLD,
    today: Optional[date] = None,
) -> Optional[BudgetSnapshot]:
    status = check_budget_status(spent, budget, threshold)
    if status is None:
        return None

    info = get_budget_period_info(period, today)
    return BudgetSnapshot(
        period=period,
        budget=round_money(_decimal(budget)),
        spent=round_money(_decimal(spent)),
        percentage=round_money(budget_percentage(spent, budget)),
        status=status,
        status_label=format_budget_status(status),
        projected=round_money(
            calculate_projected_spending(spent, info.days_elapsed, info.total_days)
        ),
    )


def budget_overview(
    totals: SpendingTotals,
    monthly_budget: Optional[Number],
    yearly_budget: Optional[Number],
    threshold: Number = DEFAULT_ALERT_THRESHOLD,
    today: Optional[date] = None,
) -> BudgetOverview:
    return BudgetOverview(
        monthly=budget_snapshot(
            BudgetPeriod.MONTHLY, totals.total_monthly, monthly_budget, threshold, today
        ),
        yearly=budget_snapshot(
            BudgetPeriod.YEARLY, totals.total_yearly, yearly_budget, threshold, today
        ),
    )
