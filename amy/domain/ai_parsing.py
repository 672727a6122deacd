"""
AI-assisted subscription parsing models.

Every field is optional so a partial parse can prefill the form; the
response lists which fields the user still has to provide.
"""

from typing import List, Literal, Optional

from pydantic import Field

from amy.domain.subscription import CamelModel


REQUIRED_FIELDS = ("name", "cost", "billing_cycle")
OPTIONAL_FIELDS = ("category", "payment_method", "icon", "next_billing_date")


class ParseSubscriptionRequest(CamelModel):
    text: Optional[str] = None


class ParsedSubscription(CamelModel):
    name: Optional[str] = Field(default=None, description="The subscription service name")
    cost: Optional[float] = Field(default=None, description="The cost per billing cycle")
    billing_cycle: Optional[Literal["monthly", "yearly"]] = None
    next_billing_date: Optional[str] = Field(
        default=None,
        pattern=r"^\d{4}-\d{2}-\d{2}$",
        description="Next billing date in YYYY-MM-DD format",
    )
    category: Optional[str] = None
    payment_method: Optional[str] = None
    icon: Optional[str] = Field(default=None, description="Simple Icons identifier")


class MissingFields(CamelModel):
    required: List[str]
    optional: List[str]


class ParseSubscriptionResponse(CamelModel):
    success: bool = True
    data: ParsedSubscription
    missing_fields: MissingFields


def _camel(field_name: str) -> str:
    head, *rest = field_name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def missing_fields(parsed: ParsedSubscription) -> MissingFields:
    """Fields the parse did not fill, in camelCase as the client sends them."""
    return MissingFields(
        required=[_camel(f) for f in REQUIRED_FIELDS if not getattr(parsed, f)],
        optional=[_camel(f) for f in OPTIONAL_FIELDS if not getattr(parsed, f)],
    )
