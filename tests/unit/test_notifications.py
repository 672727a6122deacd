"""
Unit tests for notification kinds and dedup windows.
"""

from datetime import datetime, timedelta, timezone

from amy.domain.notifications import (
    BUDGET_KINDS,
    NotificationKind,
    dedup_window,
)


NOW = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)


def test_budget_kinds():
    assert NotificationKind.BUDGET_EXCEEDED.is_budget_alert
    assert not NotificationKind.PAST_DUE.is_budget_alert
    assert len(BUDGET_KINDS) == 3


def test_subscription_kinds_use_one_local_day():
    start, end = dedup_window(NotificationKind.RENEWAL_REMINDER, NOW)
    local_start = start.astimezone()

    assert local_start.hour == 0 and local_start.minute == 0
    assert local_start.date() == NOW.astimezone().date()
    assert end - start == timedelta(days=1)
    assert start <= NOW < end


def test_budget_kinds_run_from_month_start_to_now():
    start, end = dedup_window(NotificationKind.BUDGET_APPROACHING, NOW)
    local_start = start.astimezone()

    assert end == NOW
    assert local_start.day == 1
    assert local_start.month == NOW.astimezone().month
    assert local_start.hour == 0


def test_windows_are_utc():
    start, end = dedup_window(NotificationKind.PRICE_CHANGE, NOW)
    assert start.tzinfo == timezone.utc
    assert end.tzinfo == timezone.utc
