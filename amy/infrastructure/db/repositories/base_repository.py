"""
Base Repository for Amy

Generic async repository whose every statement is filtered by the owner's
user id. Concrete repositories build queries through ``_select``, ``_update``
and ``_delete`` so the owner filter cannot be forgotten.
"""

from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel


# Type variable for generic repository
ModelType = TypeVar("ModelType", bound=SQLModel)


class OwnerScopedRepository(Generic[ModelType]):
    """
    Async CRUD bound to one owner.

    Args:
        model: The SQLModel table class (must have ``id`` and ``user_id``)
        session: Async database session
        owner_id: Authenticated user id every query is scoped to
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession, owner_id: str):
        if not owner_id:
            raise ValueError("owner_id is required")
        self._model = model
        self._session = session
        self._owner_id = owner_id

    @property
    def session(self) -> AsyncSession:
        """Get the current session."""
        return self._session

    @property
    def owner_id(self) -> str:
        return self._owner_id

    # =========================================================================
    # Statement builders
    # =========================================================================

    def _owned(self):
        return self._model.user_id == self._owner_id

    def _select(self, *criteria: Any):
        return select(self._model).where(self._owned(), *criteria)

    def _update(self, *criteria: Any):
        return update(self._model).where(self._owned(), *criteria)

    def _delete(self, *criteria: Any):
        return delete(self._model).where(self._owned(), *criteria)

    # =========================================================================
    # CRUD
    # =========================================================================

    async def get_model(self, id: int) -> Optional[ModelType]:
        """
        Get a single owned row by primary key.

        Returns:
            Model instance or None if absent or owned by someone else
        """
        result = await self._session.execute(self._select(self._model.id == id).limit(1))
        return result.scalar_one_or_none()

    async def list_models(self, *criteria: Any, order_by: Any = None) -> List[ModelType]:
        stmt = self._select(*criteria)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def add(self, db_obj: ModelType) -> ModelType:
        """Insert a row owned by the current user."""
        db_obj.user_id = self._owner_id
        self._session.add(db_obj)
        await self._session.flush()
        await self._session.refresh(db_obj)
        return db_obj

    async def delete_by_id(self, id: int) -> bool:
        """
        Delete an owned row.

        Returns:
            True if deleted, False if not found
        """
        result = await self._session.execute(self._delete(self._model.id == id))
        await self._session.flush()
        return result.rowcount > 0

    async def count(self, *criteria: Any) -> int:
        stmt = select(func.count()).select_from(self._model).where(self._owned(), *criteria)
        result = await self._session.execute(stmt)
        return result.scalar_one()
