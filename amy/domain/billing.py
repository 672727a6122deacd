"""
Billing-Cycle Engine

Read-time classification of subscriptions relative to today, plus the pure parts
of auto-renewal and explicit renewal. Persistence lives in
``amy.infrastructure.services.subscription_service``.
"""

from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from amy.domain.dates import add_one_cycle, parse_local_date, today_local
from amy.domain.subscription import Subscription, SubscriptionStatus
from amy.infrastructure.exceptions import ValidationError


def is_overdue(subscription: Subscription, today: Optional[date] = None) -> bool:
    """Active and the next billing date is before today."""
    today = today_local(today)
    return subscription.is_active and subscription.next_billing_date < today


def is_due_in_window(
    subscription: Subscription,
    days: int,
    today: Optional[date] = None,
) -> bool:
    """Active and billing within ``[today, today + days]`` inclusive."""
    today = today_local(today)
    if not subscription.is_active:
        return False
    return today <= subscription.next_billing_date <= today + timedelta(days=days)


def is_due_in_exactly(
    subscription: Subscription,
    days: int,
    today: Optional[date] = None,
) -> bool:
    """Active and billing exactly ``days`` from today (reminder trigger)."""
    today = today_local(today)
    return (
        subscription.is_active
        and subscription.next_billing_date == today + timedelta(days=days)
    )


def days_overdue(subscription: Subscription, today: Optional[date] = None) -> int:
    """Whole days past the billing date; at least 1 when overdue, else 0."""
    today = today_local(today)
    if not is_overdue(subscription, today):
        return 0
    return max(1, (today - subscription.next_billing_date).days)


def plan_auto_renewals(
    subscriptions: Iterable[Subscription],
    today: Optional[date] = None,
) -> Dict[int, date]:
    """Map each overdue subscription id to its date one cycle later.

    The advance is a single step from the stored date, so a subscription that
    missed several cycles can still be overdue afterwards.
    """
    today = today_local(today)
    return {
        sub.id: parse_local_date(add_one_cycle(sub.next_billing_date, sub.billing_cycle))
        for sub in subscriptions
        if is_overdue(sub, today)
    }


def merge_by_id(
    original: List[Subscription],
    updated: Iterable[Subscription],
) -> List[Subscription]:
    """Replace rows of ``original`` with their refreshed versions, keeping order."""
    refreshed = {sub.id: sub for sub in updated}
    return [refreshed.get(sub.id, sub) for sub in original]


def next_renewal_date(subscription: Subscription, today: Optional[date] = None) -> date:
    """Date after an explicit "mark as paid".

    Raises:
        ValidationError: the subscription is not active, or the advanced date
            would not be strictly after today.
    """
    today = today_local(today)
    if subscription.status != SubscriptionStatus.ACTIVE:
        raise ValidationError(
            "Cannot renew subscription",
            details={
                "reason": (
                    "Only active subscriptions can be renewed. "
                    f"Current status: {subscription.status.value}"
                )
            },
        )

    next_date = parse_local_date(
        add_one_cycle(subscription.next_billing_date, subscription.billing_cycle)
    )
    if next_date <= today:
        raise ValidationError(
            "Invalid date calculation",
            details={"reason": "Calculated next billing date must be in the future"},
        )
    return next_date
