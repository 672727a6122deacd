"""
Notification Dedup Gate

Check-then-record bookkeeping around every email send. Both calls are
best-effort: a failed check lets the send through, a failed record is logged.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from amy.domain.notifications import NotificationKind, dedup_window
from amy.infrastructure.db.repositories.email_notification_repository import (
    EmailNotificationRepository,
)


logger = logging.getLogger(__name__)


class NotificationGate:
    """Dedup checks for one owner, bound to a session."""

    def __init__(self, session: AsyncSession, owner_id: str):
        self.owner_id = owner_id
        self._session = session
        self._repo = EmailNotificationRepository(session, owner_id)

    async def has_already_been_sent(
        self,
        subscription_id: int,
        kind: NotificationKind,
        now: Optional[datetime] = None,
    ) -> bool:
        start, end = dedup_window(kind, now)
        try:
            return await self._repo.exists_in_window(
                subscription_id,
                kind.value,
                start,
                end,
                end_inclusive=kind.is_budget_alert,
            )
        except SQLAlchemyError as e:
            await self._session.rollback()
            logger.error(
                f"Error checking notification history for user {self.owner_id} "
                f"({kind.value}, subscription {subscription_id}): {e}"
            )
            return False

    async def record_sent(
        self,
        subscription_id: int,
        kind: NotificationKind,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        try:
            await self._repo.record(subscription_id, kind.value, details)
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            logger.error(
                f"Error recording notification for user {self.owner_id} "
                f"({kind.value}, subscription {subscription_id}): {e}"
            )
