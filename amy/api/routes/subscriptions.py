"""
Subscription API Routes

CRUD, dashboard statistics, renewal, and CSV/iCalendar exports for the
authenticated user's subscriptions. Notification emails are scheduled as
best-effort background tasks after the response data is ready.
"""

import logging
from typing import List

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from amy.api.dependencies import (
    CurrentUserDep,
    NotificationServiceDep,
    SubscriptionRepoDep,
    TaskRunnerDep,
    UserSettingsRepoDep,
)
from amy.domain.exports import (
    build_ics_calendar,
    build_ics_event,
    export_filename,
    google_calendar_url,
    subscriptions_to_csv,
)
from amy.domain.stats import SubscriptionStats, build_stats
from amy.domain.subscription import (
    DeleteResponse,
    Subscription,
    SubscriptionCreateRequest,
    SubscriptionUpdateRequest,
)
from amy.infrastructure.exceptions import NotFoundError
from amy.infrastructure.services.notification_service import NotificationService
from amy.infrastructure.services.subscription_service import auto_renew_past_due, renew_now
from amy.infrastructure.tasks import BackgroundTaskRunner


logger = logging.getLogger(__name__)

router = APIRouter()


class CalendarEventResponse(BaseModel):
    ics: str
    googleCalendarUrl: str


def _not_found(operation: str) -> NotFoundError:
    return NotFoundError("Subscription not found", operation=operation, table="subscriptions")


def _schedule_budget_check(
    runner: BackgroundTaskRunner,
    notifications: NotificationService,
    user_id: str,
) -> None:
    runner.spawn(
        notifications.check_and_send_budget_alerts(user_id),
        name=f"budget-alerts:{user_id}",
    )


# =============================================================================
# Collection
# =============================================================================

@router.get("/subscriptions", response_model=List[Subscription])
async def list_subscriptions(
    user_id: CurrentUserDep,
    repo: SubscriptionRepoDep,
    runner: TaskRunnerDep,
    notifications: NotificationServiceDep,
):
    """List subscriptions by next billing date, renewing any that are past due."""
    subscriptions = await auto_renew_past_due(repo, await repo.list_all())
    await repo.session.commit()

    runner.spawn(
        notifications.send_due_reminders(user_id, subscriptions),
        name=f"due-reminders:{user_id}",
    )
    return subscriptions


@router.post(
    "/subscriptions",
    response_model=Subscription,
    status_code=status.HTTP_201_CREATED,
)
async def create_subscription(
    payload: SubscriptionCreateRequest,
    user_id: CurrentUserDep,
    repo: SubscriptionRepoDep,
    runner: TaskRunnerDep,
    notifications: NotificationServiceDep,
):
    subscription = await repo.create(payload)
    await repo.session.commit()

    _schedule_budget_check(runner, notifications, user_id)
    return subscription


@router.get("/subscriptions/stats", response_model=SubscriptionStats)
async def get_subscription_stats(
    repo: SubscriptionRepoDep,
    settings_repo: UserSettingsRepoDep,
):
    """Totals, upcoming renewals, category breakdown and budget status."""
    subscriptions = await auto_renew_past_due(repo, await repo.list_all())
    user_settings = await settings_repo.get()
    return build_stats(subscriptions, user_settings)


# =============================================================================
# Exports
# =============================================================================

@router.get("/subscriptions/export")
async def export_subscriptions_csv(
    repo: SubscriptionRepoDep,
    settings_repo: UserSettingsRepoDep,
):
    subscriptions = await auto_renew_past_due(repo, await repo.list_all())
    user_settings = await settings_repo.get()

    return Response(
        content=subscriptions_to_csv(subscriptions, user_settings.currency),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename("csv")}"',
        },
    )


@router.get("/subscriptions/calendar/export")
async def export_subscriptions_calendar(
    repo: SubscriptionRepoDep,
    settings_repo: UserSettingsRepoDep,
):
    """iCalendar file with one recurring event per active subscription."""
    subscriptions = await auto_renew_past_due(repo, await repo.list_active())
    user_settings = await settings_repo.get()

    return Response(
        content=build_ics_calendar(subscriptions, user_settings.currency),
        media_type="text/calendar; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename("ics")}"',
        },
    )


# =============================================================================
# Single subscription
# =============================================================================

@router.get("/subscriptions/{subscription_id}", response_model=Subscription)
async def get_subscription(subscription_id: int, repo: SubscriptionRepoDep):
    subscription = await repo.get(subscription_id)
    if subscription is None:
        raise _not_found("get")
    return subscription


@router.put("/subscriptions/{subscription_id}", response_model=Subscription)
async def update_subscription(
    subscription_id: int,
    payload: SubscriptionUpdateRequest,
    user_id: CurrentUserDep,
    repo: SubscriptionRepoDep,
    runner: TaskRunnerDep,
    notifications: NotificationServiceDep,
):
    """Partial update; a cost change on an active subscription sends a price-change email."""
    existing = await repo.get(subscription_id)
    if existing is None:
        raise _not_found("update")

    changes = payload.changes()
    if not changes:
        return existing

    updated = await repo.update(subscription_id, changes)
    if updated is None:
        raise _not_found("update")
    await repo.session.commit()

    if "cost" in changes and updated.cost != existing.cost and updated.is_active:
        runner.spawn(
            notifications.send_price_change(user_id, updated, existing.cost, updated.cost),
            name=f"price-change:{subscription_id}",
        )
    _schedule_budget_check(runner, notifications, user_id)
    return updated


@router.delete("/subscriptions/{subscription_id}", response_model=DeleteResponse)
async def delete_subscription(
    subscription_id: int,
    user_id: CurrentUserDep,
    repo: SubscriptionRepoDep,
    runner: TaskRunnerDep,
    notifications: NotificationServiceDep,
):
    if not await repo.delete(subscription_id):
        raise _not_found("delete")
    await repo.session.commit()

    _schedule_budget_check(runner, notifications, user_id)
    return DeleteResponse(message="Subscription deleted successfully")


@router.post("/subscriptions/{subscription_id}/renew", response_model=Subscription)
async def renew_subscription(subscription_id: int, repo: SubscriptionRepoDep):
    """Mark as paid: advance the next billing date by one cycle."""
    return await renew_now(repo, subscription_id)


@router.get("/subscriptions/{subscription_id}/calendar", response_model=CalendarEventResponse)
async def get_subscription_calendar(
    subscription_id: int,
    repo: SubscriptionRepoDep,
    settings_repo: UserSettingsRepoDep,
):
    subscription = await repo.get(subscription_id)
    if subscription is None:
        raise _not_found("calendar")

    currency = (await settings_repo.get()).currency
    return CalendarEventResponse(
        ics=build_ics_event(subscription, currency),
        googleCalendarUrl=google_calendar_url(subscription, currency),
    )
