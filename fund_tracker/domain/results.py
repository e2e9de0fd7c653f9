"""Domain-level results for report parsing and interval analysis."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Sequence

from .models import Snapshot


class MissingField(str, Enum):
    DATE = "date"
    VALUE = "value"
    UNITS = "units"
    NAV = "nav"
    ONE_YEAR_RETURN = "one_year_return"

    @property
    def problem(self) -> str:
        return _PROBLEM_MESSAGES[self]


_PROBLEM_MESSAGES = {
    MissingField.DATE: "Missing “as of” date",
    MissingField.VALUE: "Missing Total Investment Value",
    MissingField.UNITS: "Missing Total Units",
    MissingField.NAV: "Missing NAVPU",
    MissingField.ONE_YEAR_RETURN: "Missing 1-year return",
}


@dataclass(frozen=True)
class ParseOutcome:
    """Either a fully populated snapshot or the fields that could not be located."""

    snapshot: Snapshot | None = None
    missing: Sequence[MissingField] = field(default_factory=tuple)
    text: str = ""
    fund_name: str | None = None

    @property
    def ok(self) -> bool:
        return self.snapshot is not None and not self.missing

    @property
    def problems(self) -> list[str]:
        return [item.problem for item in self.missing]


class BreakdownTag(str, Enum):
    DEPOSIT_EXECUTED = "deposit_executed"
    DIVIDEND_REINVESTED = "dividend_reinvested"
    DIVIDEND_CASH_PAYOUT = "dividend_cash_payout"
    UNLOGGED_UNIT_CHANGE = "unlogged_unit_change"
    MARKET_MOVE = "market_move"

    @property
    def label(self) -> str:
        return _TAG_LABELS[self]


_TAG_LABELS = {
    BreakdownTag.DEPOSIT_EXECUTED: "Deposit executed",
    BreakdownTag.DIVIDEND_REINVESTED: "Dividend reinvested",
    BreakdownTag.DIVIDEND_CASH_PAYOUT: "Dividend cash payout",
    BreakdownTag.UNLOGGED_UNIT_CHANGE: "Units changed (unlogged cashflow)",
    BreakdownTag.MARKET_MOVE: "Market move",
}


@dataclass(frozen=True)
class Breakdown:
    """Attributed explanation of the value change between two snapshots."""

    previous_date: date
    current_date: date
    tag: BreakdownTag
    delta_value: Decimal
    delta_units: Decimal
    delta_nav: Decimal
    implied_cashflow: Decimal
    market_effect: Decimal
    logged_cashflow: Decimal
    deposits: Decimal
    cash_dividends: Decimal
    reinvest_dividends: Decimal
    reinvested_units: Decimal
    unmatched_cashflow: Decimal | None = None
    event_count: int = 0

    @property
    def has_unmatched_cashflow(self) -> bool:
        return self.unmatched_cashflow is not None


@dataclass(frozen=True)
class RangeSummary:
    start_date: date
    end_date: date
    deposits: Decimal
    cash_dividends: Decimal
    reinvest_dividends: Decimal
    start_value: Decimal
    end_value: Decimal

    @property
    def delta_value(self) -> Decimal:
        return self.end_value - self.start_value
