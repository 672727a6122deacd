"""
Email Notification Database Model

Append-only log of sent notification emails, read by the dedup gate.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Column, DateTime, Index, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel

from amy.infrastructure.db.models.base import utcnow


class EmailNotificationModel(SQLModel, table=True):
    """Maps to the 'email_notifications' table."""

    __tablename__ = "email_notifications"
    __table_args__ = (
        Index(
            "ix_email_notifications_lookup",
            "user_id",
            "subscription_id",
            "type",
            "sent_at",
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(max_length=255, nullable=False)
    # 0 for budget-level alerts
    subscription_id: int = Field(default=0, nullable=False)
    type: str = Field(sa_column=Column(String(50), nullable=False))
    sent_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    # extra context such as old/new cost ("metadata" is reserved by SQLAlchemy)
    details: Optional[dict] = Field(
        default=None,
        sa_column=Column(JSON().with_variant(JSONB(), "postgresql")),
    )
