"""
User Settings Database Model

One row per owner holding currency and budget preferences.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Column, Numeric, String
from sqlmodel import Field

from amy.infrastructure.db.models.base import TimestampMixin


class UserSettingsModel(TimestampMixin, table=True):
    """Maps to the 'user_settings' table."""

    __tablename__ = "user_settings"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(max_length=255, unique=True, index=True, nullable=False)
    currency: str = Field(
        default="USD",
        sa_column=Column(String(3), nullable=False, server_default="USD"),
    )
    monthly_budget: Optional[Decimal] = Field(
        default=None, sa_column=Column(Numeric(10, 2), nullable=True)
    )
    yearly_budget: Optional[Decimal] = Field(
        default=None, sa_column=Column(Numeric(10, 2), nullable=True)
    )
    budget_alert_threshold: Decimal = Field(
        default=Decimal("80.00"),
        sa_column=Column(Numeric(5, 2), nullable=False, server_default="80.00"),
    )
