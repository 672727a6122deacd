"""
Notification Service

Composes and sends renewal, price-change, past-due and budget emails.

Every send follows the same sequence: dedup gate, recipient lookup, currency
lookup, render, send, and a record only after the provider accepted the
message. Runs as best-effort background work with its own session.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Iterable, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from amy.config.settings import Settings
from amy.domain.billing import days_overdue, is_due_in_exactly, is_overdue
from amy.domain.budget import BudgetAlert, decide_budget_alerts
from amy.domain.currency import DEFAULT_CURRENCY
from amy.domain.dates import today_local
from amy.domain.notifications import BUDGET_SUBSCRIPTION_ID, NotificationKind
from amy.domain.spending import aggregate_spending
from amy.domain.subscription import Subscription
from amy.infrastructure.db.dependencies import SessionScope
from amy.infrastructure.db.repositories.subscription_repository import SubscriptionRepository
from amy.infrastructure.db.repositories.user_settings_repository import UserSettingsRepository
from amy.infrastructure.email.resend_client import ResendEmailClient
from amy.infrastructure.email.templates import (
    budget_alert_email,
    past_due_email,
    price_change_email,
    renewal_reminder_email,
)
from amy.infrastructure.identity.user_directory import SupabaseUserDirectory
from amy.infrastructure.services.notification_gate import NotificationGate


logger = logging.getLogger(__name__)

# (first_name, currency) -> (subject, html)
Renderer = Callable[[Optional[str], str], Tuple[str, str]]


class NotificationService:
    """
    Sends notification emails for one application instance.

    Collaborators are passed in by the lifespan; nothing here is global.
    """

    def __init__(
        self,
        email_client: ResendEmailClient,
        user_directory: SupabaseUserDirectory,
        session_scope: SessionScope,
        settings: Settings,
    ):
        self._email = email_client
        self._users = user_directory
        self._session_scope = session_scope
        self._settings = settings

    # =========================================================================
    # Subscription notifications
    # =========================================================================

    async def send_renewal_reminder(
        self,
        owner_id: str,
        subscription: Subscription,
        kind: NotificationKind = NotificationKind.RENEWAL_REMINDER,
    ) -> bool:
        if not subscription.is_active:
            return False
        return await self._deliver(
            owner_id,
            subscription.id,
            kind,
            lambda first_name, currency: renewal_reminder_email(
                kind, subscription, first_name, currency, self._settings.dashboard_url
            ),
            details={"next_billing_date": subscription.next_billing_date.isoformat()},
        )

    async def send_price_change(
        self,
        owner_id: str,
        subscription: Subscription,
        old_cost: Decimal,
        new_cost: Decimal,
    ) -> bool:
        if not subscription.is_active:
            return False
        return await self._deliver(
            owner_id,
            subscription.id,
            NotificationKind.PRICE_CHANGE,
            lambda first_name, currency: price_change_email(
                subscription, old_cost, new_cost, first_name, currency,
                self._settings.dashboard_url,
            ),
            details={"old_cost": str(old_cost), "new_cost": str(new_cost)},
        )

    async def send_past_due(
        self,
        owner_id: str,
        subscription: Subscription,
        today: Optional[date] = None,
    ) -> bool:
        if not subscription.is_active:
            return False
        overdue = days_overdue(subscription, today)
        return await self._deliver(
            owner_id,
            subscription.id,
            NotificationKind.PAST_DUE,
            lambda first_name, currency: past_due_email(
                subscription, overdue, first_name, currency, self._settings.dashboard_url
            ),
            details={"days_overdue": overdue},
        )

    async def send_due_reminders(
        self,
        owner_id: str,
        subscriptions: Iterable[Subscription],
        today: Optional[date] = None,
    ) -> int:
        """Reminders for rows due in 3 days or tomorrow, and past-due notices."""
        today = today_local(today)
        sent = 0
        for sub in subscriptions:
            if not sub.is_active:
                continue
            if is_due_in_exactly(sub, 3, today):
                sent += await self.send_renewal_reminder(
                    owner_id, sub, NotificationKind.RENEWAL_REMINDER
                )
            elif is_due_in_exactly(sub, 1, today):
                sent += await self.send_renewal_reminder(
                    owner_id, sub, NotificationKind.RENEWAL_REMINDER_1DAY
                )
            elif is_overdue(sub, today):
                sent += await self.send_past_due(owner_id, sub, today)
        return sent

    # =========================================================================
    # Budget notifications
    # =========================================================================

    async def send_budget_alert(self, owner_id: str, alert: BudgetAlert) -> bool:
        return await self._deliver(
            owner_id,
            BUDGET_SUBSCRIPTION_ID,
            alert.kind,
            lambda first_name, currency: budget_alert_email(
                alert.kind,
                alert.period,
                alert.spent,
                alert.budget,
                alert.percentage,
                alert.projected,
                first_name,
                currency,
                self._settings.dashboard_url,
            ),
            details={
                "period": alert.period.value,
                "spent": str(alert.spent),
                "budget": str(alert.budget),
                "percentage": str(alert.percentage),
            },
        )

    async def check_and_send_budget_alerts(
        self,
        owner_id: str,
        today: Optional[date] = None,
    ) -> int:
        """Evaluate both budgets and send whichever alerts pass the gate."""
        async with self._session_scope() as session:
            user_settings = await UserSettingsRepository(session, owner_id).get()
            if not user_settings.has_budget:
                return 0
            active = await SubscriptionRepository(session, owner_id).list_active()

        alerts = decide_budget_alerts(
            aggregate_spending(active),
            user_settings.monthly_budget,
            user_settings.yearly_budget,
            user_settings.budget_alert_threshold,
            today,
        )
        sent = 0
        for alert in alerts:
            sent += await self.send_budget_alert(owner_id, alert)
        return sent

    # =========================================================================
    # Delivery
    # =========================================================================

    async def _deliver(
        self,
        owner_id: str,
        subscription_id: int,
        kind: NotificationKind,
        render: Renderer,
        details: Optional[dict] = None,
        now: Optional[datetime] = None,
    ) -> bool:
        async with self._session_scope() as session:
            gate = NotificationGate(session, owner_id)
            if await gate.has_already_been_sent(subscription_id, kind, now):
                logger.debug(
                    f"Skipping {kind.value} for user {owner_id}, "
                    f"subscription {subscription_id}: already sent"
                )
                return False

            user = await self._users.get_user_details(owner_id)
            if user is None or not user.email:
                logger.warning(f"No email found for user {owner_id}, skipping {kind.value}")
                return False

            currency = await self._currency_for(session, owner_id)
            subject, html = render(user.first_name, currency)

            result = await self._email.send(
                from_address=self._settings.email_from,
                to=user.email,
                subject=subject,
                html=html,
            )
            if not result.ok:
                logger.error(f"Failed to send {kind.value} email to {user.email}: {result.error}")
                return False

            await gate.record_sent(subscription_id, kind, details)
            logger.info(
                f"Sent {kind.value} email to {user.email} (subscription {subscription_id})"
            )
            return True

    async def _currency_for(self, session: AsyncSession, owner_id: str) -> str:
        try:
            return (await UserSettingsRepository(session, owner_id).get()).currency
        except SQLAlchemyError as e:
            logger.error(f"Error fetching currency for user {owner_id}: {e}")
            await session.rollback()
            return DEFAULT_CURRENCY
