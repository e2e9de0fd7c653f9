"""Parser turning pasted fund portal status text into snapshots.

The portal's layout is not fixed: labels and values may share a line or be
split across several, and amounts may or may not carry a currency marker.
Each fact is therefore located by its own anchored search instead of a
positional parse, so one drifting field does not sink the others.
"""
from __future__ import annotations

import logging
import re
from datetime import date
from decimal import Decimal

from fund_tracker.domain.models import ZERO, Snapshot
from fund_tracker.domain.results import MissingField, ParseOutcome
from fund_tracker.infrastructure.parsing.utils import build_date, normalize_text, parse_money_like

logger = logging.getLogger(__name__)

_NUMBER = r"(\d[\d,]*(?:\.\d+)?)"
_CURRENCY = r"(?:PHP|P)?\s*"

# "as of Jan 27, 2026", "As of December 29 2025"
DATE_PATTERN = re.compile(r"as\s+of\s+([A-Za-z]{3,9})\.?[\s,]+(\d{1,2})[\s,]+(\d{4})", re.IGNORECASE)
# "3.0700% 1 yr"
ONE_YEAR_PATTERN = re.compile(r"(-?\d[\d,]*(?:\.\d+)?)%\s*1\s*yr", re.IGNORECASE)


def _anchored(label: str, window: int) -> re.Pattern[str]:
    return re.compile(label + r"[\s\S]{0,%d}?" % window + _CURRENCY + _NUMBER, re.IGNORECASE)


VALUE_PATTERN = _anchored(r"Total\s+Investment\s+Value", 120)
UNITS_PATTERN = _anchored(r"Total\s+Units", 60)
NAV_PATTERN = _anchored(r"NAVPU", 60)
PENDING_BUY_PATTERN = _anchored(r"Pending\s+Buy\s+Orders?", 60)
PENDING_SELL_PATTERN = _anchored(r"Pending\s+Sell\s+Orders?", 60)
# "ALFM Global Multi-Asset Income Fund Inc - PHP" heading
FUND_NAME_PATTERN = re.compile(r"ALFM\s+Global[\s\S]{0,80}?Fund[\s\S]{0,80}?-?\s*PHP", re.IGNORECASE)


def extract_date(text: str) -> date | None:
    match = DATE_PATTERN.search(text)
    if not match:
        return None
    return build_date(*match.groups())


def extract_number(pattern: re.Pattern[str], text: str) -> Decimal | None:
    match = pattern.search(text)
    return parse_money_like(match.group(1)) if match else None


def extract_fund_name(text: str) -> str | None:
    match = FUND_NAME_PATTERN.search(text)
    return " ".join(match.group(0).split()) if match else None


class ReportParser:
    """Extracts a snapshot from a block of pasted portal text."""

    def parse(self, text: str) -> ParseOutcome:
        normalized = normalize_text(text)

        observed = extract_date(normalized)
        value = extract_number(VALUE_PATTERN, normalized)
        units = extract_number(UNITS_PATTERN, normalized)
        nav = extract_number(NAV_PATTERN, normalized)
        one_year = extract_number(ONE_YEAR_PATTERN, normalized)
        pending_buy = extract_number(PENDING_BUY_PATTERN, normalized)
        pending_sell = extract_number(PENDING_SELL_PATTERN, normalized)

        missing = [
            field
            for field, found in (
                (MissingField.DATE, observed),
                (MissingField.VALUE, value),
                (MissingField.UNITS, units),
                (MissingField.NAV, nav),
                (MissingField.ONE_YEAR_RETURN, one_year),
            )
            if found is None
        ]
        if missing:
            logger.debug("Report text is missing fields: %s", ", ".join(f.value for f in missing))
            return ParseOutcome(missing=tuple(missing), text=normalized)

        snapshot = Snapshot(
            observed_date=observed,
            nav_per_unit=nav,
            total_units=units,
            total_value=value,
            one_year_return_pct=one_year,
            pending_buy=ZERO if pending_buy is None else pending_buy,
            pending_sell=ZERO if pending_sell is None else pending_sell,
            source_text=normalized.strip(),
        )
        logger.debug("Parsed snapshot for %s", observed.isoformat())
        return ParseOutcome(snapshot=snapshot, text=normalized, fund_name=extract_fund_name(normalized))


def parse_report(text: str) -> ParseOutcome:
    return ReportParser().parse(text)
