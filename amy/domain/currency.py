"""Supported currencies and amount formatting."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Union


DEFAULT_CURRENCY = "USD"

SUPPORTED_CURRENCIES: Dict[str, Dict[str, str]] = {
    "USD": {"name": "US Dollar", "symbol": "$"},
    "CAD": {"name": "Canadian Dollar", "symbol": "C$"},
    "INR": {"name": "Indian Rupee", "symbol": "₹"},
    "EUR": {"name": "Euro", "symbol": "€"},
    "GBP": {"name": "British Pound", "symbol": "£"},
    "AUD": {"name": "Australian Dollar", "symbol": "A$"},
    "JPY": {"name": "Japanese Yen", "symbol": "¥"},
    "CHF": {"name": "Swiss Franc", "symbol": "CHF"},
    "NZD": {"name": "New Zealand Dollar", "symbol": "NZ$"},
    "SGD": {"name": "Singapore Dollar", "symbol": "S$"},
    "HKD": {"name": "Hong Kong Dollar", "symbol": "HK$"},
    "SEK": {"name": "Swedish Krona", "symbol": "kr"},
    "NOK": {"name": "Norwegian Krone", "symbol": "kr"},
    "DKK": {"name": "Danish Krone", "symbol": "kr"},
    "PLN": {"name": "Polish Zloty", "symbol": "zł"},
    "BRL": {"name": "Brazilian Real", "symbol": "R$"},
    "MXN": {"name": "Mexican Peso", "symbol": "$"},
    "ZAR": {"name": "South African Rand", "symbol": "R"},
}


def is_supported_currency(code: str) -> bool:
    return code in SUPPORTED_CURRENCIES


def currency_symbol(code: str) -> str:
    return SUPPORTED_CURRENCIES.get(code, SUPPORTED_CURRENCIES[DEFAULT_CURRENCY])["symbol"]


def format_currency(amount: Union[int, float, Decimal, str], currency: str = DEFAULT_CURRENCY) -> str:
    """Format with the currency symbol and two decimals; unknown codes use USD."""
    code = currency if is_supported_currency(currency) else DEFAULT_CURRENCY
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{currency_symbol(code)}{abs(value):,.2f}"
