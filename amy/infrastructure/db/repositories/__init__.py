"""
Repository Layer for Amy

Exports all repository classes for dependency injection.
"""

from amy.infrastructure.db.repositories.base_repository import OwnerScopedRepository
from amy.infrastructure.db.repositories.subscription_repository import (
    SubscriptionRepository,
)
from amy.infrastructure.db.repositories.user_settings_repository import (
    UserSettingsRepository,
)
from amy.infrastructure.db.repositories.email_notification_repository import (
    EmailNotificationRepository,
)
from amy.infrastructure.db.repositories.ai_request_repository import (
    AIRequestRepository,
)


__all__ = [
    "OwnerScopedRepository",
    "SubscriptionRepository",
    "UserSettingsRepository",
    "EmailNotificationRepository",
    "AIRequestRepository",
]
