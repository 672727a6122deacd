"""
Subscription Repository

Owner-scoped data access for tracked subscriptions with domain mapping.
"""

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from amy.domain.subscription import (
    Subscription,
    SubscriptionCreateRequest,
    SubscriptionStatus,
)
from amy.infrastructure.db.models.base import utcnow
from amy.infrastructure.db.models.subscription import SubscriptionModel
from amy.infrastructure.db.repositories.base_repository import OwnerScopedRepository


logger = logging.getLogger(__name__)


def _plain(value: Any) -> Any:
    """Store enums by value."""
    return getattr(value, "value", value)


class SubscriptionRepository(OwnerScopedRepository[SubscriptionModel]):
    """
    Repository for a single owner's subscriptions.

    Returns ``Subscription`` domain entities; table models stay inside.
    """

    def __init__(self, session: AsyncSession, owner_id: str):
        super().__init__(SubscriptionModel, session, owner_id)

    # =========================================================================
    # Query Methods
    # =========================================================================

    async def list_all(self) -> List[Subscription]:
        """All subscriptions ordered by next billing date."""
        models = await self.list_models(order_by=SubscriptionModel.next_billing_date.asc())
        return [self._to_domain(m) for m in models]

    async def list_active(self) -> List[Subscription]:
        models = await self.list_models(
            SubscriptionModel.status == SubscriptionStatus.ACTIVE.value,
            order_by=SubscriptionModel.next_billing_date.asc(),
        )
        return [self._to_domain(m) for m in models]

    async def list_by_ids(self, ids: Iterable[int]) -> List[Subscription]:
        ids = list(ids)
        if not ids:
            return []
        stmt = self._select(SubscriptionModel.id.in_(ids)).execution_options(
            populate_existing=True
        )
        result = await self.session.execute(stmt)
        return [self._to_domain(m) for m in result.scalars().all()]

    async def get(self, subscription_id: int) -> Optional[Subscription]:
        model = await self.get_model(subscription_id)
        return self._to_domain(model) if model else None

    # =========================================================================
    # Mutations
    # =========================================================================

    async def create(self, data: SubscriptionCreateRequest) -> Subscription:
        model = SubscriptionModel(
            user_id=self.owner_id,
            name=data.name,
            cost=data.cost,
            billing_cycle=_plain(data.billing_cycle),
            next_billing_date=data.next_billing_date,
            category=data.category,
            status=_plain(data.status),
            payment_method=data.payment_method,
            icon=data.icon,
        )
        model = await self.add(model)
        logger.info(f"Created subscription {model.id} for user {self.owner_id}")
        return self._to_domain(model)

    async def update(
        self,
        subscription_id: int,
        changes: Dict[str, Any],
    ) -> Optional[Subscription]:
        """
        Apply a partial update.

        Returns:
            The refreshed subscription, or None when no owned row matched
        """
        values = {field: _plain(value) for field, value in changes.items()}
        values["updated_at"] = utcnow()

        result = await self.session.execute(
            self._update(SubscriptionModel.id == subscription_id).values(**values)
        )
        await self.session.flush()
        if result.rowcount == 0:
            return None

        refreshed = await self.list_by_ids([subscription_id])
        return refreshed[0] if refreshed else None

    async def set_next_billing_date(
        self,
        subscription_id: int,
        next_billing_date: date,
    ) -> Optional[Subscription]:
        return await self.update(subscription_id, {"next_billing_date": next_billing_date})

    async def set_next_billing_dates(self, next_dates: Dict[int, date]) -> List[int]:
        """Persist several advanced dates; returns the ids that were updated."""
        updated = []
        now = utcnow()
        for subscription_id, next_date in next_dates.items():
            result = await self.session.execute(
                self._update(SubscriptionModel.id == subscription_id).values(
                    next_billing_date=next_date, updated_at=now
                )
            )
            if result.rowcount:
                updated.append(subscription_id)
        await self.session.flush()
        return updated

    async def delete(self, subscription_id: int) -> bool:
        deleted = await self.delete_by_id(subscription_id)
        if deleted:
            logger.info(f"Deleted subscription {subscription_id} for user {self.owner_id}")
        return deleted

    # =========================================================================
    # Mapping
    # =========================================================================

    @staticmethod
    def _to_domain(model: SubscriptionModel) -> Subscription:
        return Subscription.model_validate(model)
