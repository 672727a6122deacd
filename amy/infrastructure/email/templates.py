"""
Email templates.

Each builder returns ``(subject, html)`` for one notification kind.
"""

from datetime import date
from decimal import Decimal
from html import escape
from typing import Optional, Tuple

from amy.domain.budget import BudgetPeriod
from amy.domain.currency import format_currency
from amy.domain.notifications import NotificationKind
from amy.domain.subscription import Subscription


_LAYOUT = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{title} - Amy</title>
</head>
<body style="margin:0;padding:0;background-color:#f5f5f5;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,sans-serif;">
  <table width="100%" cellpadding="0" cellspacing="0" style="padding:40px 20px;">
    <tr>
      <td align="center">
        <table width="600" cellpadding="0" cellspacing="0" style="background-color:#ffffff;border-radius:8px;padding:40px;">
          <tr><td>
            <h1 style="margin:0 0 24px 0;font-size:24px;color:#000000;">Amy</h1>
            <h2 style="margin:0 0 16px 0;font-size:20px;font-weight:600;color:#000000;">{title}</h2>
            <p style="margin:0 0 16px 0;font-size:16px;color:#333333;">Hi {name},</p>
            <p style="margin:0 0 24px 0;font-size:16px;color:#333333;">{message}</p>
            {details}
            <a href="{dashboard_url}" style="display:inline-block;padding:12px 24px;background-color:#000000;color:#ffffff;text-decoration:none;border-radius:6px;">View Dashboard</a>
          </td></tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>"""


def _long_date(value: date) -> str:
    return f"{value.strftime('%B')} {value.day}, {value.year}"


def _render(title: str, first_name: Optional[str], message: str, details: str, dashboard_url: str) -> str:
    return _LAYOUT.format(
        title=escape(title),
        name=escape(first_name or "there"),
        message=message,
        details=details,
        dashboard_url=escape(dashboard_url, quote=True),
    )


def _detail_rows(*rows: Tuple[str, str]) -> str:
    cells = "".join(
        f'<tr><td style="padding:4px 0;color:#666666;">{escape(label)}</td>'
        f'<td style="padding:4px 0;text-align:right;color:#000000;">{escape(value)}</td></tr>'
        for label, value in rows
    )
    return f'<table width="100%" style="margin:0 0 24px 0;">{cells}</table>'


def renewal_reminder_email(
    kind: NotificationKind,
    subscription: Subscription,
    first_name: Optional[str],
    currency: str,
    dashboard_url: str,
) -> Tuple[str, str]:
    if kind == NotificationKind.RENEWAL_REMINDER_1DAY:
        when = "tomorrow"
        subject = f"Renewal Reminder: {subscription.name} renews tomorrow"
    else:
        when = "in 3 days"
        subject = f"Renewal Reminder: {subscription.name} renews in 3 days"

    message = f"Your subscription to <strong>{escape(subscription.name)}</strong> renews {when}."
    details = _detail_rows(
        ("Amount", format_currency(subscription.cost, currency)),
        ("Billing cycle", subscription.billing_cycle.value.capitalize()),
        ("Renewal date", _long_date(subscription.next_billing_date)),
    )
    return subject, _render("Upcoming Renewal", first_name, message, details, dashboard_url)


def price_change_email(
    subscription: Subscription,
    old_cost: Decimal,
    new_cost: Decimal,
    first_name: Optional[str],
    currency: str,
    dashboard_url: str,
) -> Tuple[str, str]:
    difference = Decimal(new_cost) - Decimal(old_cost)
    direction = "increased" if difference > 0 else "decreased"
    message = (
        f"The price of <strong>{escape(subscription.name)}</strong> has {direction} "
        f"by {escape(format_currency(abs(difference), currency))}."
    )
    details = _detail_rows(
        ("Previous price", format_currency(old_cost, currency)),
        ("New price", format_currency(new_cost, currency)),
        ("Billing cycle", subscription.billing_cycle.value.capitalize()),
    )
    subject = f"Price Change Alert: {subscription.name}"
    return subject, _render("Price Change", first_name, message, details, dashboard_url)


def past_due_email(
    subscription: Subscription,
    days_overdue: int,
    first_name: Optional[str],
    currency: str,
    dashboard_url: str,
) -> Tuple[str, str]:
    days_text = "day" if days_overdue == 1 else "days"
    message = (
        f"Your payment for <strong>{escape(subscription.name)}</strong> is "
        f"{days_overdue} {days_text} past due."
    )
    details = _detail_rows(
        ("Amount", format_currency(subscription.cost, currency)),
        ("Due date", _long_date(subscription.next_billing_date)),
    )
    subject = f"Past Due: {subscription.name} payment overdue"
    return subject, _render("Payment Past Due", first_name, message, details, dashboard_url)


BUDGET_TITLES = {
    NotificationKind.BUDGET_EXCEEDED: "Budget Exceeded",
    NotificationKind.BUDGET_APPROACHING: "Budget Alert",
    NotificationKind.BUDGET_PROJECTED_EXCEED: "Projected Budget Alert",
}


def budget_alert_email(
    kind: NotificationKind,
    period: BudgetPeriod,
    spent: Decimal,
    budget: Decimal,
    percentage: Decimal,
    projected: Decimal,
    first_name: Optional[str],
    currency: str,
    dashboard_url: str,
) -> Tuple[str, str]:
    title = BUDGET_TITLES[kind]
    period_word = "month" if period == BudgetPeriod.MONTHLY else "year"
    formatted_budget = format_currency(budget, currency)

    if kind == NotificationKind.BUDGET_PROJECTED_EXCEED:
        message = (
            "Based on your current spending rate, you're projected to spend "
            f"{format_currency(projected, currency)} this {period_word}, "
            f"which exceeds your budget of {formatted_budget}."
        )
    else:
        message = (
            f"You've spent {format_currency(spent, currency)} of your {period.value} "
            f"budget of {formatted_budget} ({Decimal(percentage):.1f}%)."
        )

    subject = f"{title}: {period.value.capitalize()} subscription budget"
    return subject, _render(title, first_name, escape(message), "", dashboard_url)
