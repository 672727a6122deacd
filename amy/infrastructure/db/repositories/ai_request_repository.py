"""
AI Request Repository

Append-only log of AI endpoint calls for the hourly rate limit.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from amy.infrastructure.db.models.ai_request import AIRequestModel
from amy.infrastructure.db.repositories.base_repository import OwnerScopedRepository


class AIRequestRepository(OwnerScopedRepository[AIRequestModel]):

    def __init__(self, session: AsyncSession, owner_id: str):
        super().__init__(AIRequestModel, session, owner_id)

    async def count_since(self, since: datetime) -> int:
        return await self.count(AIRequestModel.requested_at >= since)

    async def oldest_since(self, since: datetime) -> Optional[datetime]:
        """Timestamp of the oldest request at or after ``since``."""
        stmt = select(func.min(AIRequestModel.requested_at)).where(
            self._owned(), AIRequestModel.requested_at >= since
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def record(self, endpoint: str, input_length: Optional[int] = None) -> AIRequestModel:
        return await self.add(
            AIRequestModel(
                user_id=self.owner_id,
                endpoint=endpoint,
                input_length=input_length,
            )
        )

    async def delete_older_than(self, cutoff: datetime) -> int:
        result = await self.session.execute(
            self._delete(AIRequestModel.requested_at < cutoff)
        )
        await self.session.flush()
        return result.rowcount
