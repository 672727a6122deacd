"""
Subscription Domain Models

Enums, the subscription entity, and request DTOs for the subscription
bounded context. API payloads use camelCase aliases.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from amy.domain.dates import parse_local_date
from amy.infrastructure.exceptions import ParseError


MAX_SUBSCRIPTION_COST = Decimal("99999999.99")


class BillingCycle(str, Enum):
    """Recurrence period of a subscription."""
    MONTHLY = "monthly"
    YEARLY = "yearly"


class SubscriptionStatus(str, Enum):
    """Subscription lifecycle status."""
    ACTIVE = "active"
    CANCELLED = "cancelled"
    PAUSED = "paused"


class CamelModel(BaseModel):
    """Base for API-facing models serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _coerce_billing_date(value: Any) -> Any:
    if value is None:
        return value
    try:
        return parse_local_date(value)
    except ParseError as e:
        raise ValueError(e.message)


# =============================================================================
# Domain Entities
# =============================================================================

class Subscription(CamelModel):
    """Core subscription domain entity."""
    id: int
    user_id: str
    name: str
    cost: Decimal
    billing_cycle: BillingCycle
    next_billing_date: date
    category: Optional[str] = None
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    payment_method: Optional[str] = None
    icon: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == SubscriptionStatus.ACTIVE


# =============================================================================
# Request DTOs
# =============================================================================

class SubscriptionCreateRequest(CamelModel):
    """Request DTO for creating a subscription."""
    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    cost: Decimal = Field(
        ...,
        gt=0,
        le=MAX_SUBSCRIPTION_COST,
        decimal_places=2,
        description="Cost per billing cycle",
    )
    billing_cycle: BillingCycle = Field(..., description="monthly or yearly")
    next_billing_date: date = Field(..., description="Next renewal date (YYYY-MM-DD)")
    category: Optional[str] = Field(default=None, max_length=100)
    status: SubscriptionStatus = Field(default=SubscriptionStatus.ACTIVE)
    payment_method: Optional[str] = Field(default=None, max_length=100)
    icon: Optional[str] = Field(default=None, max_length=100)

    @field_validator("next_billing_date", mode="before")
    @classmethod
    def validate_next_billing_date(cls, value: Any) -> Any:
        return _coerce_billing_date(value)

    @field_validator("category", "payment_method", "icon")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class SubscriptionUpdateRequest(CamelModel):
    """Partial update; only fields present in the payload are applied."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    cost: Optional[Decimal] = Field(
        default=None, gt=0, le=MAX_SUBSCRIPTION_COST, decimal_places=2
    )
    billing_cycle: Optional[BillingCycle] = None
    next_billing_date: Optional[date] = None
    category: Optional[str] = Field(default=None, max_length=100)
    status: Optional[SubscriptionStatus] = None
    payment_method: Optional[str] = Field(default=None, max_length=100)
    icon: Optional[str] = Field(default=None, max_length=100)

    @field_validator("next_billing_date", mode="before")
    @classmethod
    def validate_next_billing_date(cls, value: Any) -> Any:
        return _coerce_billing_date(value)

    @field_validator("category", "payment_method", "icon")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    def changes(self) -> dict[str, Any]:
        """Fields explicitly sent by the client, keyed by attribute name."""
        data = self.model_dump(exclude_unset=True)
        for required in ("name", "cost", "billing_cycle", "next_billing_date", "status"):
            if required in data and data[required] is None:
                data.pop(required)
        return data


class DeleteResponse(BaseModel):
    message: str


# Categories offered to the AI parser and the UI's template picker.
SUBSCRIPTION_CATEGORIES = [
    "Streaming",
    "Music",
    "Software",
    "Productivity",
    "Cloud Storage",
    "Gaming",
    "News",
    "Fitness",
    "Education",
    "Utilities",
    "Shopping",
    "Finance",
    "Food & Delivery",
    "Other",
]
