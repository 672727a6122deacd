"""
Email Notification Repository

Append-only log of sent emails, queried by time window for deduplication.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from amy.infrastructure.db.models.email_notification import EmailNotificationModel
from amy.infrastructure.db.repositories.base_repository import OwnerScopedRepository


class EmailNotificationRepository(OwnerScopedRepository[EmailNotificationModel]):

    def __init__(self, session: AsyncSession, owner_id: str):
        super().__init__(EmailNotificationModel, session, owner_id)

    async def exists_in_window(
        self,
        subscription_id: int,
        kind: str,
        start: datetime,
        end: datetime,
        end_inclusive: bool = False,
    ) -> bool:
        """True when a record of ``kind`` was sent within ``[start, end)``."""
        sent_at = EmailNotificationModel.sent_at
        stmt = self._select(
            EmailNotificationModel.subscription_id == subscription_id,
            EmailNotificationModel.type == kind,
            sent_at >= start,
            sent_at <= end if end_inclusive else sent_at < end,
        ).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def record(
        self,
        subscription_id: int,
        kind: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> EmailNotificationModel:
        return await self.add(
            EmailNotificationModel(
                user_id=self.owner_id,
                subscription_id=subscription_id,
                type=kind,
                details=details,
            )
        )
