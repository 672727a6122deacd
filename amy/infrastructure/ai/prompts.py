"""Prompt builders for the Gemini calls."""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from amy.domain.budget_analysis import Confidence, SpendingAnalysis


def build_parse_subscription_prompt(text: str, today: date, categories: List[str]) -> str:
    year = today.year
    return f"""Parse the following user input about a subscription and extract structured data.

User input: "{text}"

Current date context: Today is {today.isoformat()} (Year: {year}, Month: {today.month})

Instructions:
- Extract the subscription name (e.g., "Netflix", "Spotify Premium")
- Extract the cost amount. If yearly cost is mentioned, convert to monthly by dividing by 12
- Determine billing cycle (monthly or yearly). If ambiguous, default to monthly
- Extract next billing/renewal date if mentioned. Parse dates like "nov 22nd", "November 22", "11/22", "{year}-11-22" and convert to YYYY-MM-DD format.
  If no year is specified in the date, use {year}. If that date has already passed this year, use the next year.
  If no date is mentioned at all, omit this field.
- Categorize from these options: {", ".join(categories)}
- Extract payment method if mentioned (e.g., "Credit Card", "PayPal", "Apple Pay")
- Suggest an icon identifier if it's a well-known service (lowercase, e.g., "netflix", "spotify", "youtube")

Examples:
- "I pay $15.99 monthly for Netflix" -> name: "Netflix", cost: 15.99, billingCycle: "monthly", category: "Streaming", icon: "netflix"
- "Spotify Premium $10.99 per month, next payment nov 22nd" -> name: "Spotify Premium", cost: 10.99, billingCycle: "monthly", category: "Music", icon: "spotify", nextBillingDate: "{year}-11-22"

If any information is missing or unclear, omit that field. Only extract what you can confidently determine.

Respond with a single JSON object using only these keys:
{{"name": string, "cost": number, "billingCycle": "monthly" | "yearly", "nextBillingDate": "YYYY-MM-DD", "category": string, "paymentMethod": string, "icon": string}}"""


def build_budget_prompt(
    analysis: SpendingAnalysis,
    context: str,
    monthly_budget: Optional[Decimal],
    yearly_budget: Optional[Decimal],
    currency: str,
    confidence: Confidence,
) -> str:
    has_budget = bool(monthly_budget or yearly_budget)

    if has_budget:
        goal = "review and potentially adjust their existing subscription budget"
        guidance = """IMPORTANT: The user already has budgets set. Your recommendations should:
   - Compare their current budget vs their actual spending
   - Suggest adjustments if their spending patterns have changed
   - Validate if their current budget is realistic (too high, too low, or just right)
   - Explain whether they should increase, decrease, or maintain their current budget"""
    else:
        goal = "set realistic subscription budgets"
        guidance = """The user doesn't have a budget set yet. Your recommendations should:
   - Help them establish their first budget based on current spending patterns
   - Provide a starting point they can adjust over time"""

    monthly_compare = (
        f"\n   - Compares with their current monthly budget of {monthly_budget} {currency}"
        if monthly_budget else ""
    )
    yearly_compare = (
        f"\n   - Compares with their current yearly budget of {yearly_budget} {currency}"
        if yearly_budget else ""
    )

    return f"""You are a financial advisor helping a user {goal}.

{context}

{guidance}

Based on this analysis, provide personalized budget recommendations:

1. Monthly Budget: a realistic monthly budget that
   - Accounts for current monthly spending ({analysis.total_monthly} {currency}/month)
   - Includes a 15-20% buffer for new subscriptions or price increases{monthly_compare}

2. Yearly Budget: a yearly budget that
   - Accounts for current yearly spending ({analysis.total_yearly} {currency}/year). This is already annualized.
   - Is approximately (suggested monthly budget * 12) plus a buffer. Do NOT multiply the yearly spending again.{yearly_compare}

3. Reasoning: 2-4 sentences (at least 50 characters) explaining the amounts.

4. Confidence: use "{confidence}".

5. Insights: 2-4 actionable insights about their spending.

Respond with a single JSON object:
{{"suggestedMonthlyBudget": number, "suggestedYearlyBudget": number, "reasoning": string, "confidence": "high" | "medium" | "low", "insights": [string]}}"""
