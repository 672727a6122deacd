"""
Database Infrastructure Package for Amy

Exports database utilities and session dependencies.
"""

from amy.infrastructure.db.database import (
    DatabaseManager,
    get_db_manager,
    get_session,
    get_session_context,
    init_db,
    close_db,
)

from amy.infrastructure.db.dependencies import (
    SessionDep,
    SessionScope,
)


__all__ = [
    # Database management
    "DatabaseManager",
    "get_db_manager",
    "get_session",
    "get_session_context",
    "init_db",
    "close_db",
    # Dependencies
    "SessionDep",
    "SessionScope",
]
