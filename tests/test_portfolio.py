from datetime import date
from decimal import Decimal

import pytest

from conftest import make_snapshot
from fund_tracker.domain.errors import InvalidSnapshotError
from fund_tracker.domain.models import Event, Snapshot
from fund_tracker.domain.portfolio import Portfolio


def test_same_date_snapshot_replaces_previous():
    portfolio = Portfolio()
    first = make_snapshot(date(2026, 1, 27), "5.10", "100")
    second = make_snapshot(date(2026, 1, 27), "5.20", "120")

    assert portfolio.upsert_snapshot(first) is None
    replaced = portfolio.upsert_snapshot(second)

    assert replaced is first
    assert len(portfolio.snapshots) == 1
    survivor = portfolio.snapshots[0]
    assert survivor.id == second.id
    assert survivor.nav_per_unit == Decimal("5.20")
    assert survivor.total_units == Decimal("120")


def test_sorted_views_and_neighbours():
    portfolio = Portfolio()
    jan = make_snapshot(date(2026, 1, 1), "10", "1")
    feb = make_snapshot(date(2026, 2, 1), "11", "1")
    mar = make_snapshot(date(2026, 3, 1), "12", "1")
    for snapshot in (mar, jan, feb):
        portfolio.upsert_snapshot(snapshot)

    assert portfolio.sorted_snapshots() == [jan, feb, mar]
    assert portfolio.latest() is mar
    assert portfolio.previous_of(mar) is feb
    assert portfolio.previous_of(jan) is None
    assert list(portfolio.adjacent_pairs()) == [(jan, feb), (feb, mar)]


def test_delete_last_snapshot_removes_latest_date():
    portfolio = Portfolio()
    jan = make_snapshot(date(2026, 1, 1), "10", "1")
    feb = make_snapshot(date(2026, 2, 1), "11", "1")
    portfolio.upsert_snapshot(feb)
    portfolio.upsert_snapshot(jan)

    assert portfolio.delete_last_snapshot() is feb
    assert portfolio.snapshots == [jan]
    assert Portfolio().delete_last_snapshot() is None


def test_snapshots_in_range_counts_back_from_latest():
    portfolio = Portfolio()
    for day in (date(2025, 10, 1), date(2025, 12, 15), date(2026, 1, 14)):
        portfolio.upsert_snapshot(make_snapshot(day, "10", "1"))

    recent = portfolio.snapshots_in_range(30)

    assert [s.observed_date for s in recent] == [date(2025, 12, 15), date(2026, 1, 14)]
    assert len(portfolio.snapshots_in_range(None)) == 3


def test_remove_event_and_clear():
    portfolio = Portfolio()
    event = Event.deposit(date(2026, 1, 5), Decimal("100"))
    portfolio.add_event(event)

    assert portfolio.remove_event(event.id)
    assert not portfolio.remove_event(event.id)

    portfolio.add_event(event)
    portfolio.upsert_snapshot(make_snapshot(date(2026, 1, 1), "10", "1"))
    portfolio.clear()
    assert portfolio.snapshots == [] and portfolio.events == []


def test_negative_core_figures_are_rejected():
    with pytest.raises(InvalidSnapshotError):
        Snapshot(
            observed_date=date(2026, 1, 1),
            nav_per_unit=Decimal("-1"),
            total_units=Decimal("1"),
            total_value=Decimal("1"),
            one_year_return_pct=Decimal("0"),
        )
