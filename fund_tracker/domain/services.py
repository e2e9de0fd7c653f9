"""Domain services attributing value changes between snapshots."""
from __future__ import annotations

import logging
from datetime import date
from decimal import Context, Decimal
from typing import Iterable, Sequence

from fund_tracker.config import SETTINGS

from .errors import IntervalOrderError
from .models import ZERO, Event, Snapshot
from .results import Breakdown, BreakdownTag, RangeSummary

logger = logging.getLogger(__name__)


def events_between(events: Iterable[Event], start: date, end: date) -> list[Event]:
    """Events dated in the half-open interval ``(start, end]``."""
    return [event for event in events if start < event.date <= end]


def nav_on_or_before(snapshots: Iterable[Snapshot], on: date) -> Decimal | None:
    best: Snapshot | None = None
    for snapshot in snapshots:
        if snapshot.observed_date > on:
            continue
        if best is None or snapshot.observed_date > best.observed_date:
            best = snapshot
    return best.nav_per_unit if best is not None else None


def summarize_range(snapshots: Sequence[Snapshot], events: Iterable[Event]) -> RangeSummary | None:
    """Cashflow totals between the first and last snapshot, both ends inclusive."""
    if len(snapshots) < 2:
        return None
    ordered = sorted(snapshots, key=lambda s: s.observed_date)
    first, last = ordered[0], ordered[-1]

    deposits = cash_dividends = reinvest_dividends = ZERO
    for event in events:
        if not first.observed_date <= event.date <= last.observed_date:
            continue
        if event.is_deposit:
            deposits += event.amount
        elif event.is_cash_dividend:
            cash_dividends += event.amount
        elif event.is_reinvested_dividend:
            reinvest_dividends += event.amount

    return RangeSummary(
        start_date=first.observed_date,
        end_date=last.observed_date,
        deposits=deposits,
        cash_dividends=cash_dividends,
        reinvest_dividends=reinvest_dividends,
        start_value=first.total_value,
        end_value=last.total_value,
    )


class BreakdownAnalyzer:
    """Explains how a fund position moved between two observations."""

    def __init__(
        self,
        unit_epsilon: Decimal | None = None,
        gap_tolerance: Decimal | None = None,
        decimal_context: Context | None = None,
    ) -> None:
        self._epsilon = SETTINGS.unit_epsilon if unit_epsilon is None else unit_epsilon
        self._tolerance = SETTINGS.gap_tolerance if gap_tolerance is None else gap_tolerance
        self._context = decimal_context or SETTINGS.decimal_context

    def explain_interval(
        self,
        previous: Snapshot,
        current: Snapshot,
        events: Iterable[Event],
        snapshots: Sequence[Snapshot] | None = None,
    ) -> Breakdown:
        if previous.observed_date >= current.observed_date:
            raise IntervalOrderError(previous.observed_date, current.observed_date)
        if snapshots is None:
            snapshots = (previous, current)

        delta_value = current.total_value - previous.total_value
        delta_units = current.total_units - previous.total_units
        delta_nav = current.nav_per_unit - previous.nav_per_unit
        # Approximation: units are priced at the closing NAV, not their settlement NAV.
        implied_cashflow = delta_units * current.nav_per_unit
        market_effect = previous.total_units * delta_nav

        in_range = events_between(events, previous.observed_date, current.observed_date)
        deposits = cash_dividends = reinvest_dividends = reinvested_units = ZERO
        for event in in_range:
            if event.is_deposit:
                deposits += event.amount
            elif event.is_cash_dividend:
                cash_dividends += event.amount
            elif event.is_reinvested_dividend:
                reinvest_dividends += event.amount
                nav = self._conversion_nav(event, snapshots, current)
                if nav > 0:
                    reinvested_units += self._context.divide(event.amount, nav)

        tag = self._classify(delta_units, deposits, cash_dividends, reinvest_dividends)

        logged_cashflow = deposits + reinvest_dividends
        gap = implied_cashflow - logged_cashflow
        unmatched = gap if abs(gap) > self._tolerance else None
        if unmatched is not None:
            logger.info(
                "Unmatched cashflow of %s between %s and %s",
                unmatched,
                previous.observed_date.isoformat(),
                current.observed_date.isoformat(),
            )

        return Breakdown(
            previous_date=previous.observed_date,
            current_date=current.observed_date,
            tag=tag,
            delta_value=delta_value,
            delta_units=delta_units,
            delta_nav=delta_nav,
            implied_cashflow=implied_cashflow,
            market_effect=market_effect,
            logged_cashflow=logged_cashflow,
            deposits=deposits,
            cash_dividends=cash_dividends,
            reinvest_dividends=reinvest_dividends,
            reinvested_units=reinvested_units,
            unmatched_cashflow=unmatched,
            event_count=len(in_range),
        )

    def explain_history(self, snapshots: Sequence[Snapshot], events: Sequence[Event]) -> list[Breakdown]:
        ordered = sorted(snapshots, key=lambda s: s.observed_date)
        return [
            self.explain_interval(previous, current, events, snapshots=ordered)
            for previous, current in zip(ordered, ordered[1:])
        ]

    def _classify(
        self,
        delta_units: Decimal,
        deposits: Decimal,
        cash_dividends: Decimal,
        reinvest_dividends: Decimal,
    ) -> BreakdownTag:
        # Logged explanations take precedence over unexplained unit drift.
        units_moved = abs(delta_units) > self._epsilon
        if units_moved and deposits > 0:
            return BreakdownTag.DEPOSIT_EXECUTED
        if units_moved and reinvest_dividends > 0:
            return BreakdownTag.DIVIDEND_REINVESTED
        if not units_moved and cash_dividends > 0:
            return BreakdownTag.DIVIDEND_CASH_PAYOUT
        if units_moved:
            return BreakdownTag.UNLOGGED_UNIT_CHANGE
        return BreakdownTag.MARKET_MOVE

    @staticmethod
    def _conversion_nav(event: Event, snapshots: Sequence[Snapshot], current: Snapshot) -> Decimal:
        if event.nav_override is not None and event.nav_override.is_finite():
            return event.nav_override
        nav = nav_on_or_before(snapshots, event.date)
        return nav if nav is not None else current.nav_per_unit
