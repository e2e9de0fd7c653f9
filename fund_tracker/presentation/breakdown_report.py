"""Human-readable renderings of interval breakdowns and portfolio insights."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from fund_tracker.domain.models import Event, EventKind, Snapshot
from fund_tracker.domain.portfolio import Portfolio
from fund_tracker.domain.results import Breakdown, RangeSummary
from fund_tracker.domain.services import BreakdownAnalyzer, summarize_range
from fund_tracker.presentation.formatting import fmt_money, fmt_num, fmt_pct, nice_date


@dataclass(frozen=True)
class TimelineEntry:
    kind: str
    on: date
    title: str
    subtitle: str
    badge: str
    details: tuple[str, ...] = field(default_factory=tuple)


def change_badge(delta: Decimal | None) -> str:
    if delta is None:
        return "—"
    if delta > 0:
        return "UP"
    if delta < 0:
        return "DOWN"
    return "FLAT"


def breakdown_notes(breakdown: Breakdown) -> list[str]:
    notes = [
        f"ΔValue {fmt_money(breakdown.delta_value)} | ΔUnits {fmt_num(breakdown.delta_units)} "
        f"| ΔNAV {fmt_money(breakdown.delta_nav)}",
        f"Implied cashflow from unit change ≈ {fmt_money(breakdown.implied_cashflow)}",
    ]
    if breakdown.deposits:
        notes.append(f"Logged deposits in range: {fmt_money(breakdown.deposits)}")
    if breakdown.cash_dividends:
        notes.append(f"Cash dividends in range: {fmt_money(breakdown.cash_dividends)}")
    if breakdown.reinvest_dividends:
        notes.append(
            f"Reinvest dividends in range: {fmt_money(breakdown.reinvest_dividends)} "
            f"(≈ {fmt_num(breakdown.reinvested_units)} units)"
        )
    notes.append(f"Market effect estimate (units constant): ≈ {fmt_money(breakdown.market_effect)}")
    if breakdown.unmatched_cashflow is not None:
        notes.append(
            f"Unmatched cashflow estimate: ≈ {fmt_money(breakdown.unmatched_cashflow)} "
            "(could be execution timing, NAV differences, or missing event logs)"
        )
    return notes


def latest_insight(portfolio: Portfolio, analyzer: BreakdownAnalyzer | None = None) -> str:
    snapshots = portfolio.sorted_snapshots()
    if len(snapshots) < 2:
        return "Add at least 2 snapshots to see insights."
    previous, current = snapshots[-2], snapshots[-1]
    breakdown = (analyzer or BreakdownAnalyzer()).explain_interval(
        previous, current, portfolio.events, snapshots=snapshots
    )
    direction = "up" if breakdown.delta_value >= 0 else "down"
    return (
        f"Since {nice_date(previous.observed_date)}, your value is {direction} by "
        f"{fmt_money(breakdown.delta_value)}. Auto tag: {breakdown.tag.label}."
    )


def range_summary_text(summary: RangeSummary | None) -> str:
    if summary is None:
        return "Add more snapshots to compute a range breakdown."
    return " • ".join(
        [
            f"Range: {nice_date(summary.start_date)} → {nice_date(summary.end_date)}",
            f"Deposits: {fmt_money(summary.deposits)}",
            f"Dividends (cash): {fmt_money(summary.cash_dividends)} | (reinvest): "
            f"{fmt_money(summary.reinvest_dividends)}",
            f"Value change: {fmt_money(summary.delta_value)} (from {fmt_money(summary.start_value)} "
            f"to {fmt_money(summary.end_value)})",
        ]
    )


def portfolio_range_summary(portfolio: Portfolio, range_days: int | None = None) -> str:
    return range_summary_text(summarize_range(portfolio.snapshots_in_range(range_days), portfolio.events))


def _snapshot_entry(snapshot: Snapshot, previous: Snapshot | None, auto: str) -> TimelineEntry:
    delta = snapshot.total_value - previous.total_value if previous else None
    return TimelineEntry(
        kind="snapshot",
        on=snapshot.observed_date,
        title=f"Snapshot • {nice_date(snapshot.observed_date)}",
        subtitle=(
            f"NAVPU {fmt_money(snapshot.nav_per_unit)} • Units {fmt_num(snapshot.total_units)} • "
            f"Value {fmt_money(snapshot.total_value)} • 1Y {fmt_pct(snapshot.one_year_return_pct)}"
        ),
        badge=change_badge(delta),
        details=(
            f"Auto: {auto}",
            f"Pending Buy: {fmt_money(snapshot.pending_buy)}",
            f"Pending Sell: {fmt_money(snapshot.pending_sell)}",
        ),
    )


def _event_entry(event: Event) -> TimelineEntry:
    when = nice_date(event.date)
    if event.kind is EventKind.DEPOSIT:
        parts = [fmt_money(event.amount)]
        if event.note:
            parts.append(event.note)
        return TimelineEntry(
            kind="event",
            on=event.date,
            title=f"Deposit • {when}",
            subtitle=" • ".join(parts),
            badge="CASHFLOW",
        )

    reinvest = event.is_reinvested_dividend
    parts = [fmt_money(event.amount)]
    if reinvest and event.nav_override:
        parts.append(f"NAV {fmt_money(event.nav_override)}")
    if event.note:
        parts.append(event.note)
    return TimelineEntry(
        kind="event",
        on=event.date,
        title=f"{'Dividend (Reinvest)' if reinvest else 'Dividend (Cash)'} • {when}",
        subtitle=" • ".join(parts),
        badge="INCOME",
    )


def timeline_entries(portfolio: Portfolio, analyzer: BreakdownAnalyzer | None = None) -> list[TimelineEntry]:
    """Snapshots and events merged newest first."""
    analyzer = analyzer or BreakdownAnalyzer()
    snapshots = portfolio.sorted_snapshots()

    entries: list[TimelineEntry] = []
    previous: Snapshot | None = None
    for snapshot in snapshots:
        auto = "First snapshot"
        if previous is not None:
            auto = analyzer.explain_interval(previous, snapshot, portfolio.events, snapshots=snapshots).tag.label
        entries.append(_snapshot_entry(snapshot, previous, auto))
        previous = snapshot
    entries.extend(_event_entry(event) for event in portfolio.sorted_events())

    # Stable sort keeps a snapshot ahead of events sharing its date.
    entries.sort(key=lambda entry: entry.on, reverse=True)
    return entries
