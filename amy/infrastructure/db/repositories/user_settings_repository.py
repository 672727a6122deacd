"""
User Settings Repository

Reads and lazily creates the owner's settings row.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from amy.domain.user_settings import UserSettings
from amy.infrastructure.db.models.user_settings import UserSettingsModel
from amy.infrastructure.db.repositories.base_repository import OwnerScopedRepository


logger = logging.getLogger(__name__)


class UserSettingsRepository(OwnerScopedRepository[UserSettingsModel]):
    """Repository for the single settings row of an owner."""

    def __init__(self, session: AsyncSession, owner_id: str):
        super().__init__(UserSettingsModel, session, owner_id)

    async def _get_row(self) -> Optional[UserSettingsModel]:
        result = await self.session.execute(self._select().limit(1))
        return result.scalar_one_or_none()

    async def get(self) -> UserSettings:
        """Effective settings; defaults when the owner has no row yet."""
        row = await self._get_row()
        if row is None:
            return UserSettings()
        return UserSettings.model_validate(row)

    async def save(self, changes: Dict[str, Any]) -> UserSettings:
        """Create or update the owner's row with the given fields."""
        row = await self._get_row()
        if row is None:
            row = UserSettingsModel(user_id=self.owner_id, **changes)
            row = await self.add(row)
            logger.info(f"Created settings for user {self.owner_id}")
            return UserSettings.model_validate(row)

        for field, value in changes.items():
            setattr(row, field, value)
        self.session.add(row)
        await self.session.flush()
        await self.session.refresh(row)
        return UserSettings.model_validate(row)
