"""
Subscription Service

Persistence side of the billing-cycle engine: auto-renewal on read and the
explicit "mark as paid" renewal.
"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from amy.domain.billing import merge_by_id, next_renewal_date, plan_auto_renewals
from amy.domain.dates import today_local
from amy.domain.subscription import Subscription
from amy.infrastructure.db.repositories.subscription_repository import SubscriptionRepository
from amy.infrastructure.exceptions import NotFoundError


logger = logging.getLogger(__name__)


async def auto_renew_past_due(
    repo: SubscriptionRepository,
    subscriptions: List[Subscription],
    today: Optional[date] = None,
) -> List[Subscription]:
    """
    Advance every overdue active subscription by one billing cycle.

    Returns the list with renewed rows replaced in place. A persistence
    failure is logged and the original list is returned unchanged.
    """
    plan = plan_auto_renewals(subscriptions, today_local(today))
    if not plan:
        return subscriptions

    try:
        updated_ids = await repo.set_next_billing_dates(plan)
        refreshed = await repo.list_by_ids(updated_ids)
    except SQLAlchemyError as e:
        logger.error(f"Error auto-renewing subscriptions for user {repo.owner_id}: {e}")
        await repo.session.rollback()
        return subscriptions

    logger.info(f"Auto-renewed {len(refreshed)} subscription(s) for user {repo.owner_id}")
    return merge_by_id(subscriptions, refreshed)


async def renew_now(
    repo: SubscriptionRepository,
    subscription_id: int,
    today: Optional[date] = None,
) -> Subscription:
    """
    Mark a subscription as paid and move it to the next billing date.

    Raises:
        NotFoundError: no subscription with this id for the owner
        ValidationError: not active, or the new date would not be in the future
    """
    subscription = await repo.get(subscription_id)
    if subscription is None:
        raise NotFoundError("Subscription not found", operation="renew", table="subscriptions")

    next_date = next_renewal_date(subscription, today)
    renewed = await repo.set_next_billing_date(subscription_id, next_date)
    if renewed is None:
        raise NotFoundError("Subscription not found", operation="renew", table="subscriptions")

    logger.info(
        f"Renewed subscription {subscription_id} for user {repo.owner_id} "
        f"until {next_date.isoformat()}"
    )
    return renewed
