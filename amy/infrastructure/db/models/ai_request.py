"""
AI Request Database Model

Append-only log of AI endpoint calls backing the hourly rate limit.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime, Index
from sqlmodel import Field, SQLModel

from amy.infrastructure.db.models.base import utcnow


class AIRequestModel(SQLModel, table=True):
    """Maps to the 'ai_requests' table."""

    __tablename__ = "ai_requests"
    __table_args__ = (
        Index("ix_ai_requests_user_requested_at", "user_id", "requested_at"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(max_length=255, nullable=False)
    endpoint: str = Field(max_length=50, nullable=False)
    requested_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    input_length: Optional[int] = Field(default=None)
