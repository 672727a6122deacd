"""
Subscription Database Model

SQLModel table for tracked recurring subscriptions.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Column, Date, Index, Numeric, String
from sqlmodel import Field

from amy.infrastructure.db.models.base import TimestampMixin


class SubscriptionModel(TimestampMixin, table=True):
    """
    Maps to the 'subscriptions' table.

    ``next_billing_date`` is a date-only column; money is fixed-point.
    """

    __tablename__ = "subscriptions"
    __table_args__ = (
        Index("ix_subscriptions_user_next_billing", "user_id", "next_billing_date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(max_length=255, index=True, nullable=False)
    name: str = Field(max_length=255, nullable=False)
    cost: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))
    billing_cycle: str = Field(sa_column=Column(String(20), nullable=False))
    next_billing_date: date = Field(sa_column=Column(Date, nullable=False))
    category: Optional[str] = Field(default=None, max_length=100)
    status: str = Field(
        default="active",
        sa_column=Column(String(20), nullable=False, server_default="active"),
    )
    payment_method: Optional[str] = Field(default=None, max_length=100)
    icon: Optional[str] = Field(default=None, max_length=100)
