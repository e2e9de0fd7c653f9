"""Display formatting for money, units and percentages."""
from __future__ import annotations

from datetime import date
from decimal import Decimal

from fund_tracker.config import SETTINGS

PLACEHOLDER = "—"


def fmt_money(value: Decimal | None, symbol: str | None = None) -> str:
    if value is None:
        return PLACEHOLDER
    return f"{symbol or SETTINGS.currency_symbol} {value:,.2f}"


def fmt_num(value: Decimal | None, digits: int = 4) -> str:
    if value is None:
        return PLACEHOLDER
    return f"{value:,.{digits}f}"


def fmt_pct(value: Decimal | None) -> str:
    if value is None:
        return PLACEHOLDER
    return f"{value:.2f}%"


def nice_date(value: date) -> str:
    return f"{value:%b} {value.day:02d}, {value.year}"
