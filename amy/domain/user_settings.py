"""
User Settings Domain Models

Currency preference and budget limits. One settings row per owner, created
lazily on the first write.
"""

from decimal import Decimal
from typing import Any, Optional

from pydantic import Field, field_validator

from amy.domain.budget import DEFAULT_ALERT_THRESHOLD
from amy.domain.currency import DEFAULT_CURRENCY, SUPPORTED_CURRENCIES
from amy.domain.subscription import CamelModel


MAX_BUDGET = Decimal("9999999.99")


class UserSettings(CamelModel):
    """Effective settings for an owner (defaults when no row exists)."""
    currency: str = DEFAULT_CURRENCY
    monthly_budget: Optional[Decimal] = None
    yearly_budget: Optional[Decimal] = None
    budget_alert_threshold: Decimal = DEFAULT_ALERT_THRESHOLD

    @property
    def has_budget(self) -> bool:
        return bool(self.monthly_budget) or bool(self.yearly_budget)


class UserSettingsResponse(CamelModel):
    currency: str
    monthly_budget: Optional[float] = None
    yearly_budget: Optional[float] = None
    budget_alert_threshold: float

    @classmethod
    def from_settings(cls, settings: UserSettings) -> "UserSettingsResponse":
        return cls(
            currency=settings.currency,
            monthly_budget=float(settings.monthly_budget) if settings.monthly_budget is not None else None,
            yearly_budget=float(settings.yearly_budget) if settings.yearly_budget is not None else None,
            budget_alert_threshold=float(settings.budget_alert_threshold),
        )


class UserSettingsUpdateRequest(CamelModel):
    """Partial update. A null budget clears it."""
    currency: Optional[str] = Field(default=None, description="ISO 4217 code")
    monthly_budget: Optional[Decimal] = Field(default=None, gt=0, le=MAX_BUDGET)
    yearly_budget: Optional[Decimal] = Field(default=None, gt=0, le=MAX_BUDGET)
    budget_alert_threshold: Optional[Decimal] = Field(default=None, ge=50, le=100)

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in SUPPORTED_CURRENCIES:
            raise ValueError("Invalid currency code")
        return value

    def changes(self) -> dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        for not_nullable in ("currency", "budget_alert_threshold"):
            if not_nullable in data and data[not_nullable] is None:
                data.pop(not_nullable)
        return data
