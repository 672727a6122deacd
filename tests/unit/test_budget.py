"""
Unit tests for the budget status engine and alert decisions.
"""

from datetime import date
from decimal import Decimal

import pytest

from amy.domain.budget import (
    BudgetPeriod,
    BudgetStatus,
    budget_snapshot,
    calculate_projected_spending,
    check_budget_status,
    decide_budget_alerts,
    evaluate_budget,
    format_budget_status,
    get_budget_period_info,
)
from amy.domain.notifications import NotificationKind
from amy.domain.spending import aggregate_spending


MID_OCTOBER = date(2026, 10, 17)


class TestCheckBudgetStatus:

    @pytest.mark.parametrize(
        "spent, budget, expected",
        [
            (80, 100, BudgetStatus.APPROACHING),
            (100, 100, BudgetStatus.EXCEEDED),
            (150, 100, BudgetStatus.EXCEEDED),
            (79.99, 100, BudgetStatus.UNDER),
            (50, None, None),
            (50, 0, None),
        ],
    )
    def test_default_threshold(self, spent, budget, expected):
        assert check_budget_status(spent, budget, 80) == expected

    def test_custom_threshold(self):
        assert check_budget_status(60, 100, 50) == BudgetStatus.APPROACHING
        assert check_budget_status(60, 100, 90) == BudgetStatus.UNDER

    def test_labels(self):
        assert format_budget_status(BudgetStatus.EXCEEDED) == "Budget Exceeded"
        assert format_budget_status(None) == "No Budget Set"


class TestPeriods:

    def test_monthly_period(self):
        info = get_budget_period_info(BudgetPeriod.MONTHLY, MID_OCTOBER)
        assert info.start_date == date(2026, 10, 1)
        assert info.end_date == date(2026, 10, 31)
        assert info.days_elapsed == 16
        assert info.days_remaining == 14
        assert info.total_days == 31

    def test_yearly_period(self):
        info = get_budget_period_info(BudgetPeriod.YEARLY, MID_OCTOBER)
        assert info.start_date == date(2026, 1, 1)
        assert info.total_days == 365
        assert info.days_elapsed == 289

    def test_leap_year_february(self):
        info = get_budget_period_info(BudgetPeriod.MONTHLY, date(2028, 2, 10))
        assert info.total_days == 29

    def test_projection(self):
        assert calculate_projected_spending(100, 0, 30) == 100
        assert calculate_projected_spending(100, 10, 30) == 300


class TestAlertDecisions:

    def test_approaching_with_projection_over_budget(self):
        alerts = evaluate_budget(BudgetPeriod.MONTHLY, 90, 100, 80, MID_OCTOBER)
        assert [a.kind for a in alerts] == [
            NotificationKind.BUDGET_APPROACHING,
            NotificationKind.BUDGET_PROJECTED_EXCEED,
        ]

    def test_exceeded_suppresses_projection_alert(self):
        alerts = evaluate_budget(BudgetPeriod.MONTHLY, 120, 100, 80, MID_OCTOBER)
        assert [a.kind for a in alerts] == [NotificationKind.BUDGET_EXCEEDED]
        assert alerts[0].percentage == Decimal(120)

    def test_projection_only_while_under(self):
        alerts = evaluate_budget(BudgetPeriod.MONTHLY, 60, 100, 80, MID_OCTOBER)
        assert [a.kind for a in alerts] == [NotificationKind.BUDGET_PROJECTED_EXCEED]

    def test_first_day_of_period_uses_current_spend(self):
        alerts = evaluate_budget(BudgetPeriod.MONTHLY, 10, 100, 80, date(2026, 10, 1))
        assert alerts == []

    def test_no_budget_no_alerts(self):
        assert evaluate_budget(BudgetPeriod.YEARLY, 500, None) == []

    def test_yearly_budget_uses_annualized_spend(self, sample_subscriptions):
        totals = aggregate_spending(sample_subscriptions)
        alerts = decide_budget_alerts(totals, None, Decimal("300"), 80, MID_OCTOBER)
        assert [(a.kind, a.period) for a in alerts] == [
            (NotificationKind.BUDGET_EXCEEDED, BudgetPeriod.YEARLY),
        ]
        assert alerts[0].spent == Decimal("311.88")


def test_snapshot_rounds_for_reporting():
    snapshot = budget_snapshot(BudgetPeriod.MONTHLY, Decimal("33.333"), Decimal("100"), 80, MID_OCTOBER)
    assert snapshot.spent == 33.33
    assert snapshot.percentage == 33.33
    assert snapshot.status == BudgetStatus.UNDER
    assert snapshot.projected == 64.58
    assert budget_snapshot(BudgetPeriod.MONTHLY, 10, None) is None
