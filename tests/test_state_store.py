from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path
import json

import pytest

from conftest import make_snapshot
from fund_tracker.domain.errors import StateFileError
from fund_tracker.domain.models import Event, EventKind, PayoutMode
from fund_tracker.domain.portfolio import Portfolio
from fund_tracker.infrastructure.repositories.json_repository import JsonPortfolioRepository
from fund_tracker.infrastructure.storage.state_store import (
    export_document,
    import_document,
    load_portfolio,
    save_portfolio,
)


def make_portfolio() -> Portfolio:
    portfolio = Portfolio(fund_name="Test Fund")
    portfolio.upsert_snapshot(make_snapshot(date(2026, 1, 1), "5.1271", "1234.5678", value="6329.87"))
    portfolio.add_event(Event.deposit(date(2026, 1, 5), Decimal("1000"), note="payday"))
    portfolio.add_event(
        Event.dividend(date(2026, 1, 9), Decimal("12.34"), PayoutMode.REINVEST, nav_override=Decimal("5.2"))
    )
    return portfolio


def test_save_and_load_portfolio(tmp_path: Path):
    path = tmp_path / "nested" / "state.json"
    portfolio = make_portfolio()

    save_portfolio(portfolio, path=path)
    raw = json.loads(path.read_text())
    assert raw["fundName"] == "Test Fund"
    assert raw["snapshots"][0]["asOfISO"] == "2026-01-01"
    assert raw["snapshots"][0]["value"] == "6329.87"
    assert raw["events"][1]["dividendType"] == "reinvest"

    loaded = load_portfolio(path=path)
    assert loaded.fund_name == "Test Fund"
    assert loaded.snapshots == portfolio.snapshots
    assert loaded.sorted_events() == portfolio.sorted_events()


def test_missing_file_loads_empty(tmp_path: Path):
    portfolio = load_portfolio(path=tmp_path / "absent.json")

    assert portfolio.snapshots == []
    assert portfolio.events == []


def test_corrupt_file_loads_empty(tmp_path: Path):
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")

    assert load_portfolio(path=path).snapshots == []


def test_export_and_import_document():
    portfolio = make_portfolio()
    exported_at = datetime(2026, 1, 10, tzinfo=timezone.utc)

    text = export_document(portfolio, exported_at=exported_at)
    document = json.loads(text)
    assert document["exportedAt"] == "2026-01-10T00:00:00+00:00"
    assert "data" in document

    imported = import_document(text)
    assert imported.snapshots == portfolio.snapshots
    assert len(imported.events) == 2


def test_import_accepts_raw_state_and_defaults_dividend_mode():
    raw = {
        "snapshots": [],
        "events": [{"id": "e1", "type": "dividend", "date": "2026-01-09", "amount": 10}],
    }

    imported = import_document(json.dumps(raw))

    event = imported.events[0]
    assert event.kind is EventKind.DIVIDEND
    assert event.payout_mode is PayoutMode.REINVEST
    assert event.nav_override is None
    assert event.amount == Decimal("10")


@pytest.mark.parametrize(
    "document",
    [
        "[]",
        '{"snapshots": []}',
        '{"snapshots": [{"asOf": "2026-01-01", "navpu": "abc", "units": "1", "value": "1", "oneYearReturn": "1"}], "events": []}',
        '{"snapshots": [{"asOf": "not-a-date", "navpu": "1", "units": "1", "value": "1", "oneYearReturn": "1"}], "events": []}',
        '{"snapshots": [], "events": [{"type": "withdrawal", "date": "2026-01-01", "amount": "1"}]}',
        "{broken",
    ],
)
def test_import_rejects_malformed_documents(document: str):
    with pytest.raises(StateFileError):
        import_document(document)


def test_json_repository_round_trip(tmp_path: Path):
    repository = JsonPortfolioRepository(tmp_path / "state.json")

    repository.save(make_portfolio())

    assert len(repository.load().snapshots) == 1


def test_import_reads_browser_export_with_iso_keys():
    document = {
        "exportedAt": "2026-01-28T02:15:00.000Z",
        "app": "ALFM GFunds Tracker",
        "data": {
            "fundName": "ALFM Global Multi-Asset Income Fund Inc - PHP",
            "snapshots": [
                {
                    "id": "s1",
                    "asOfISO": "2026-01-27",
                    "navpu": 5.1271,
                    "units": 1234.5678,
                    "value": 6329.87,
                    "oneYearReturn": 3.07,
                    "pendingBuy": 0,
                    "pendingSell": 0,
                    "rawText": "",
                }
            ],
            "events": [
                {"id": "e1", "type": "dividend", "dateISO": "2026-01-20", "amount": 12.5, "note": "",
                 "dividendType": "cash", "navOverride": None},
                {"id": "e2", "type": "deposit", "dateISO": "2026-01-05", "amount": 1000, "note": "payday"},
            ],
            "ui": {"sortKey": "date", "sortDir": "desc", "rangeDays": 90},
        },
    }

    imported = import_document(json.dumps(document))

    snapshot = imported.snapshots[0]
    assert snapshot.observed_date == date(2026, 1, 27)
    assert snapshot.total_value == Decimal("6329.87")
    assert snapshot.nav_per_unit == Decimal("5.1271")
    assert [e.date for e in imported.sorted_events()] == [date(2026, 1, 5), date(2026, 1, 20)]
    assert imported.sorted_events()[1].payout_mode is PayoutMode.CASH
    assert imported.fund_name == "ALFM Global Multi-Asset Income Fund Inc - PHP"
