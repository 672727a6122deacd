"""
Subscription Exports

CSV export of the subscription list, iCalendar events for renewals, and
Google Calendar "add event" links.
"""

import csv
import io
from datetime import date, datetime
from typing import Iterable, List, Optional
from urllib.parse import quote

from amy.domain.currency import DEFAULT_CURRENCY, format_currency
from amy.domain.dates import ensure_utc, format_date, next_day, utc_now
from amy.domain.subscription import BillingCycle, Subscription
from amy.infrastructure.exceptions import ValidationError


CSV_HEADERS = [
    "Name",
    "Cost",
    "Billing Cycle",
    "Next Billing Date",
    "Category",
    "Status",
    "Payment Method",
    "Created At",
    "Updated At",
]

ICS_PRODID = "-//Amy Subscription Tracker//EN"
GOOGLE_CALENDAR_URL = "https://calendar.google.com/calendar/render"


def export_filename(extension: str, today: Optional[date] = None) -> str:
    return f"amy-subscriptions-{format_date(today or date.today())}.{extension}"


# =============================================================================
# CSV
# =============================================================================

def _timestamp_date(value: Optional[datetime]) -> str:
    return format_date(ensure_utc(value).date()) if value else ""


def subscriptions_to_csv(
    subscriptions: Iterable[Subscription],
    currency: str = DEFAULT_CURRENCY,
) -> str:
    """Render subscriptions as CSV; fields with commas, quotes or newlines are quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(CSV_HEADERS)
    for sub in subscriptions:
        writer.writerow([
            sub.name,
            format_currency(sub.cost, currency),
            sub.billing_cycle.value.capitalize(),
            format_date(sub.next_billing_date),
            sub.category or "",
            sub.status.value.capitalize(),
            sub.payment_method or "",
            _timestamp_date(sub.created_at),
            _timestamp_date(sub.updated_at),
        ])
    return buffer.getvalue()


# =============================================================================
# iCalendar
# =============================================================================

def escape_ics_text(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def _ics_date(value: date) -> str:
    return value.strftime("%Y%m%d")


def _event_description(subscription: Subscription, currency: str) -> str:
    cycle = subscription.billing_cycle.value
    parts = [f"Cost: {format_currency(subscription.cost, currency)}/{cycle}"]
    if subscription.payment_method:
        parts.append(f"Payment Method: {subscription.payment_method}")
    if subscription.category:
        parts.append(f"Category: {subscription.category}")
    parts.append(f"Billing Cycle: {cycle}")
    parts.append(
        "Recurring: "
        + ("Monthly" if subscription.billing_cycle == BillingCycle.MONTHLY else "Yearly")
    )
    return "\n".join(parts)


def _require_active(subscription: Subscription) -> None:
    if not subscription.is_active:
        raise ValidationError("Only active subscriptions can be added to calendar")


def build_ics_event(subscription: Subscription, currency: str = DEFAULT_CURRENCY) -> str:
    """All-day recurring VEVENT on the next billing date."""
    _require_active(subscription)

    start = subscription.next_billing_date
    frequency = "MONTHLY" if subscription.billing_cycle == BillingCycle.MONTHLY else "YEARLY"
    lines = [
        "BEGIN:VEVENT",
        f"UID:amy-subscription-{subscription.id}@amy.bz",
        f"DTSTART;VALUE=DATE:{_ics_date(start)}",
        f"DTEND;VALUE=DATE:{_ics_date(next_day(start))}",
        f"RRULE:FREQ={frequency};INTERVAL=1",
        f"SUMMARY:{escape_ics_text(f'{subscription.name} Renewal')}",
        f"DESCRIPTION:{escape_ics_text(_event_description(subscription, currency))}",
        "STATUS:CONFIRMED",
        "SEQUENCE:0",
        "END:VEVENT",
    ]
    return "\r\n".join(lines)


def build_ics_calendar(
    subscriptions: Iterable[Subscription],
    currency: str = DEFAULT_CURRENCY,
    now: Optional[datetime] = None,
) -> str:
    """VCALENDAR with one event per active subscription."""
    active: List[Subscription] = [sub for sub in subscriptions if sub.is_active]
    if not active:
        raise ValidationError("No active subscriptions to export")

    stamp = ensure_utc(now or utc_now()).strftime("%Y%m%dT%H%M%SZ")
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{ICS_PRODID}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        f"DTSTAMP:{stamp}",
        *(build_ics_event(sub, currency) for sub in active),
        "END:VCALENDAR",
    ]
    return "\r\n".join(lines) + "\r\n"


def google_calendar_url(subscription: Subscription, currency: str = DEFAULT_CURRENCY) -> str:
    """Google Calendar template link; recurrence is described in the details text."""
    _require_active(subscription)

    start = subscription.next_billing_date
    safe = "!~*'()"
    title = quote(f"{subscription.name} Renewal", safe=safe)
    details = quote(_event_description(subscription, currency), safe=safe)
    dates = f"{_ics_date(start)}/{_ics_date(next_day(start))}"
    return f"{GOOGLE_CALENDAR_URL}?action=TEMPLATE&text={title}&dates={dates}&details={details}"
