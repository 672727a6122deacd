"""
Notification kinds and dedup windows.

A notification of a given kind is sent at most once per window for an
(owner, subscription) pair. Budget alerts use subscription id 0.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from amy.domain.dates import local_midnight, next_day, utc_now


BUDGET_SUBSCRIPTION_ID = 0


class NotificationKind(str, Enum):
    """Types of email notifications recorded in ``email_notifications``."""
    RENEWAL_REMINDER = "renewal_reminder"
    RENEWAL_REMINDER_1DAY = "renewal_reminder_1day"
    PRICE_CHANGE = "price_change"
    PAST_DUE = "past_due"
    BUDGET_APPROACHING = "budget_approaching"
    BUDGET_EXCEEDED = "budget_exceeded"
    BUDGET_PROJECTED_EXCEED = "budget_projected_exceed"

    @property
    def is_budget_alert(self) -> bool:
        return self in BUDGET_KINDS


BUDGET_KINDS = frozenset({
    NotificationKind.BUDGET_APPROACHING,
    NotificationKind.BUDGET_EXCEEDED,
    NotificationKind.BUDGET_PROJECTED_EXCEED,
})


def dedup_window(
    kind: NotificationKind,
    now: Optional[datetime] = None,
) -> Tuple[datetime, datetime]:
    """Return the ``[start, end)`` UTC window checked for an earlier send.

    Subscription kinds: local today 00:00 to tomorrow 00:00.
    Budget kinds: local 00:00 on the first of the current month up to ``now``.
    The budget window is monthly for yearly-budget alerts as well.
    """
    now = now or utc_now()
    local_today = now.astimezone().date()

    if kind.is_budget_alert:
        month_start = local_today.replace(day=1)
        return local_midnight(month_start), now
    return local_midnight(local_today), local_midnight(next_day(local_today))
