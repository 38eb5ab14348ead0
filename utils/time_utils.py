"""
utils/time_utils.py

Purpose: Time and money formatting helpers

- Receipt dates
- Minor-unit amounts to display strings
"""

from datetime import datetime, timezone
from typing import Optional

CURRENCY_SYMBOLS = {"usd": "$", "eur": "€", "gbp": "£"}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_receipt_date(dt: Optional[datetime] = None) -> str:
    """
    Formats a date for receipts, e.g. "March 5, 2026".
    """
    dt = dt or utcnow()
    return f"{dt.strftime('%B')} {dt.day}, {dt.year}"


def format_amount(amount_cents: Optional[int], currency: str = "usd") -> str:
    """
    Formats an amount in minor units, e.g. (5000, "usd") -> "$50.00".
    """
    if amount_cents is None:
        return "N/A"
    symbol = CURRENCY_SYMBOLS.get(currency.lower())
    value = f"{amount_cents / 100:,.2f}"
    if symbol:
        return f"{symbol}{value}"
    return f"{value} {currency.upper()}"
