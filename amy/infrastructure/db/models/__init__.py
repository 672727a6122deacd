"""
SQLModel ORM Models for Amy

Exports all database models for Alembic autogenerate and application use.
Import models here to register them with SQLModel.metadata.
"""

from amy.infrastructure.db.models.base import TimestampMixin
from amy.infrastructure.db.models.subscription import SubscriptionModel
from amy.infrastructure.db.models.user_settings import UserSettingsModel
from amy.infrastructure.db.models.email_notification import EmailNotificationModel
from amy.infrastructure.db.models.ai_request import AIRequestModel


__all__ = [
    "TimestampMixin",
    "SubscriptionModel",
    "UserSettingsModel",
    "EmailNotificationModel",
    "AIRequestModel",
]
