"""Application-level DTOs for the fund tracker workflows."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from fund_tracker.domain.models import PayoutMode, Snapshot
from fund_tracker.domain.results import Breakdown, ParseOutcome


@dataclass(slots=True, frozen=True)
class DepositRequest:
    on: date
    amount: Decimal | str
    note: str = ""


@dataclass(slots=True, frozen=True)
class DividendRequest:
    on: date
    amount: Decimal | str
    payout_mode: PayoutMode | str
    nav_override: Decimal | str | None = None
    note: str = ""


@dataclass(slots=True, frozen=True)
class IngestResponse:
    outcome: ParseOutcome
    replaced: Snapshot | None = None


@dataclass(slots=True, frozen=True)
class IntervalBreakdown:
    previous: Snapshot
    current: Snapshot
    breakdown: Breakdown
