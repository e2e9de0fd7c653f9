"""Shared parsing utilities for pasted portal text."""
from __future__ import annotations

import re
from datetime import date
from decimal import Decimal, InvalidOperation

_NON_NUMERIC = re.compile(r"[^\d.,-]")
_FULL_MONTHS = {
    name: idx
    for idx, name in enumerate(
        (
            "january", "february", "march", "april", "may", "june",
            "july", "august", "september", "october", "november", "december",
        ),
        start=1,
    )
}


def normalize_text(text: str | None) -> str:
    return (text or "").replace("\r", "")


def parse_money_like(value: object) -> Decimal | None:
    """Parse "PHP 6,329.87", "P 6,329.87" or "6,329.87" into a Decimal.

    Anything that does not leave a finite number behind is treated as absent.
    """
    if value is None:
        return None
    cleaned = _NON_NUMERIC.sub("", str(value))
    if not any(ch.isdigit() for ch in cleaned):
        return None
    try:
        result = Decimal(cleaned.replace(",", ""))
    except InvalidOperation:
        return None
    return result if result.is_finite() else None


def month_number(token: str) -> int | None:
    """Resolve a full or abbreviated English month name ("Jan", "Sept", "January")."""
    name = token.strip().rstrip(".").lower()
    if len(name) < 3:
        return None
    for full, number in _FULL_MONTHS.items():
        if full.startswith(name):
            return number
    return None


def build_date(month_token: str, day_token: str, year_token: str) -> date | None:
    month = month_number(month_token)
    if month is None:
        return None
    try:
        return date(int(year_token), month, int(day_token))
    except ValueError:
        return None
