"""
Unit tests for AI parse models.
"""

import pytest
from pydantic import ValidationError

from amy.domain.ai_parsing import (
    ParseSubscriptionResponse,
    ParsedSubscription,
    missing_fields,
)


def test_full_parse_has_nothing_missing():
    parsed = ParsedSubscription(
        name="Spotify",
        cost=10.99,
        billing_cycle="monthly",
        next_billing_date="2026-11-22",
        category="Music",
        payment_method="Visa",
        icon="spotify",
    )
    result = missing_fields(parsed)
    assert result.required == []
    assert result.optional == []


def test_missing_fields_use_camel_case():
    result = missing_fields(ParsedSubscription(name="Spotify"))
    assert result.required == ["cost", "billingCycle"]
    assert result.optional == ["category", "paymentMethod", "icon", "nextBillingDate"]


def test_accepts_camel_case_model_output():
    parsed = ParsedSubscription.model_validate(
        {"name": "Disney+", "billingCycle": "yearly", "nextBillingDate": "2027-01-01"}
    )
    assert parsed.billing_cycle == "yearly"
    assert parsed.next_billing_date == "2027-01-01"


@pytest.mark.parametrize(
    "data",
    [
        {"billingCycle": "weekly"},
        {"nextBillingDate": "next friday"},
    ],
)
def test_rejects_invalid_model_output(data):
    with pytest.raises(ValidationError):
        ParsedSubscription.model_validate(data)


def test_response_shape():
    parsed = ParsedSubscription(name="Spotify", cost=10.99)
    response = ParseSubscriptionResponse(data=parsed, missing_fields=missing_fields(parsed))
    dumped = response.model_dump(by_alias=True)

    assert dumped["success"] is True
    assert dumped["data"]["name"] == "Spotify"
    assert dumped["missingFields"]["required"] == ["billingCycle"]
