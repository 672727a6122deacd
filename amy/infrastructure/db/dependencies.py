"""
Dependency Injection Providers for Amy

Database session types. Owner-scoped repositories are built on top of these
in ``amy.api.dependencies``, where the authenticated owner is known.
"""

from contextlib import AbstractAsyncContextManager
from typing import Annotated, Callable

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from amy.infrastructure.db.database import get_session


# Type alias for session dependency
SessionDep = Annotated[AsyncSession, Depends(get_session)]

# Opens an independent, self-committing session (background work)
SessionScope = Callable[[], AbstractAsyncContextManager[AsyncSession]]
