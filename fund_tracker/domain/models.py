"""Domain models for the fund tracker.

Snapshots are dated observations parsed from the account portal; events are
cash movements the user logs by hand. Both are immutable once created.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from .errors import InvalidSnapshotError

ZERO = Decimal("0")


def new_id() -> str:
    return uuid.uuid4().hex


class EventKind(str, Enum):
    DEPOSIT = "deposit"
    DIVIDEND = "dividend"


class PayoutMode(str, Enum):
    CASH = "cash"
    REINVEST = "reinvest"


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time observation of a fund position."""

    observed_date: date
    nav_per_unit: Decimal
    total_units: Decimal
    total_value: Decimal
    one_year_return_pct: Decimal
    pending_buy: Decimal = ZERO
    pending_sell: Decimal = ZERO
    source_text: str = ""
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        for name in ("nav_per_unit", "total_units", "total_value"):
            value = getattr(self, name)
            if value < 0:
                raise InvalidSnapshotError(f"{name} must not be negative, got {value}")


@dataclass(frozen=True)
class Event:
    """A logged deposit or dividend."""

    kind: EventKind
    date: date
    amount: Decimal
    payout_mode: PayoutMode | None = None
    nav_override: Decimal | None = None
    note: str = ""
    id: str = field(default_factory=new_id)

    @classmethod
    def deposit(cls, on: date, amount: Decimal, note: str = "") -> "Event":
        return cls(kind=EventKind.DEPOSIT, date=on, amount=amount, note=note)

    @classmethod
    def dividend(
        cls,
        on: date,
        amount: Decimal,
        payout_mode: PayoutMode,
        nav_override: Decimal | None = None,
        note: str = "",
    ) -> "Event":
        return cls(
            kind=EventKind.DIVIDEND,
            date=on,
            amount=amount,
            payout_mode=payout_mode,
            nav_override=nav_override,
            note=note,
        )

    @property
    def is_deposit(self) -> bool:
        return self.kind is EventKind.DEPOSIT

    @property
    def is_cash_dividend(self) -> bool:
        return self.kind is EventKind.DIVIDEND and self.payout_mode is PayoutMode.CASH

    @property
    def is_reinvested_dividend(self) -> bool:
        # Any dividend not paid out as cash counts as reinvested.
        return self.kind is EventKind.DIVIDEND and self.payout_mode is not PayoutMode.CASH
