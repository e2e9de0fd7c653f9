"""JSON persistence for the portfolio state."""
from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from fund_tracker.config import SETTINGS
from fund_tracker.domain.errors import InvalidSnapshotError, StateFileError
from fund_tracker.domain.models import ZERO, Event, EventKind, PayoutMode, Snapshot, new_id
from fund_tracker.domain.portfolio import Portfolio

logger = logging.getLogger(__name__)

APP_NAME = "Fund Snapshot Tracker"


def _decimal(raw: Any, name: str, default: Decimal | None = None) -> Decimal | None:
    if raw is None or raw == "":
        return default
    try:
        value = Decimal(str(raw))
    except InvalidOperation as exc:
        raise StateFileError(f"Invalid number for {name}: {raw!r}") from exc
    if not value.is_finite():
        raise StateFileError(f"Invalid number for {name}: {raw!r}")
    return value


def _required_decimal(raw: Any, name: str) -> Decimal:
    value = _decimal(raw, name)
    if value is None:
        raise StateFileError(f"Missing {name}")
    return value


def _iso_date(raw: Any, name: str) -> date:
    try:
        return date.fromisoformat(str(raw))
    except (TypeError, ValueError) as exc:
        raise StateFileError(f"Invalid date for {name}: {raw!r}") from exc


def _first(raw: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if raw.get(key) not in (None, ""):
            return raw[key]
    return None


def _str_or_none(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


def snapshot_to_dict(snapshot: Snapshot) -> dict[str, Any]:
    return {
        "id": snapshot.id,
        "asOfISO": snapshot.observed_date.isoformat(),
        "navpu": str(snapshot.nav_per_unit),
        "units": str(snapshot.total_units),
        "value": str(snapshot.total_value),
        "oneYearReturn": str(snapshot.one_year_return_pct),
        "pendingBuy": str(snapshot.pending_buy),
        "pendingSell": str(snapshot.pending_sell),
        "rawText": snapshot.source_text,
    }


def snapshot_from_dict(raw: dict[str, Any]) -> Snapshot:
    if not isinstance(raw, dict):
        raise StateFileError(f"Snapshot entry must be an object, got {type(raw).__name__}")
    try:
        return Snapshot(
            id=str(raw.get("id") or new_id()),
            observed_date=_iso_date(_first(raw, "asOfISO", "asOf"), "asOfISO"),
            nav_per_unit=_required_decimal(raw.get("navpu"), "navpu"),
            total_units=_required_decimal(raw.get("units"), "units"),
            total_value=_required_decimal(raw.get("value"), "value"),
            one_year_return_pct=_required_decimal(raw.get("oneYearReturn"), "oneYearReturn"),
            pending_buy=_decimal(raw.get("pendingBuy"), "pendingBuy", ZERO),
            pending_sell=_decimal(raw.get("pendingSell"), "pendingSell", ZERO),
            source_text=str(raw.get("rawText") or ""),
        )
    except InvalidSnapshotError as exc:
        raise StateFileError(str(exc)) from exc


def event_to_dict(event: Event) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": event.id,
        "type": event.kind.value,
        "dateISO": event.date.isoformat(),
        "amount": str(event.amount),
        "note": event.note,
    }
    if event.kind is EventKind.DIVIDEND:
        data["dividendType"] = (PayoutMode.CASH if event.is_cash_dividend else PayoutMode.REINVEST).value
        data["navOverride"] = _str_or_none(event.nav_override)
    return data


def event_from_dict(raw: dict[str, Any]) -> Event:
    if not isinstance(raw, dict):
        raise StateFileError(f"Event entry must be an object, got {type(raw).__name__}")
    try:
        kind = EventKind(str(raw.get("type", "")).lower())
    except ValueError as exc:
        raise StateFileError(f"Unknown event type: {raw.get('type')!r}") from exc

    payout_mode = None
    nav_override = None
    if kind is EventKind.DIVIDEND:
        # Anything not explicitly cash was recorded as a reinvestment.
        mode_raw = str(raw.get("dividendType") or PayoutMode.REINVEST.value).lower()
        payout_mode = PayoutMode.CASH if mode_raw == PayoutMode.CASH.value else PayoutMode.REINVEST
        nav_override = _decimal(raw.get("navOverride"), "navOverride")

    return Event(
        id=str(raw.get("id") or new_id()),
        kind=kind,
        date=_iso_date(_first(raw, "dateISO", "date"), "dateISO"),
        amount=_required_decimal(raw.get("amount"), "amount"),
        payout_mode=payout_mode,
        nav_override=nav_override,
        note=str(raw.get("note") or ""),
    )


def portfolio_to_dict(portfolio: Portfolio) -> dict[str, Any]:
    return {
        "fundName": portfolio.fund_name,
        "snapshots": [snapshot_to_dict(s) for s in portfolio.sorted_snapshots()],
        "events": [event_to_dict(e) for e in portfolio.sorted_events()],
    }


def portfolio_from_dict(raw: dict[str, Any]) -> Portfolio:
    if not isinstance(raw, dict):
        raise StateFileError("State document must be a JSON object")
    snapshots = raw.get("snapshots")
    events = raw.get("events")
    if not isinstance(snapshots, list) or not isinstance(events, list):
        raise StateFileError("State document needs 'snapshots' and 'events' lists")

    portfolio = Portfolio(fund_name=str(raw.get("fundName") or SETTINGS.default_fund_name))
    for entry in snapshots:
        portfolio.upsert_snapshot(snapshot_from_dict(entry))
    for entry in events:
        portfolio.add_event(event_from_dict(entry))
    return portfolio


def export_document(portfolio: Portfolio, exported_at: datetime | None = None) -> str:
    document = {
        "exportedAt": (exported_at or datetime.now(timezone.utc)).isoformat(),
        "app": APP_NAME,
        "data": portfolio_to_dict(portfolio),
    }
    return json.dumps(document, ensure_ascii=False, indent=2)


def import_document(text: str) -> Portfolio:
    """Accept either an exported document or a bare state object."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise StateFileError(f"Invalid JSON: {exc.msg}") from exc
    if isinstance(data, dict) and isinstance(data.get("data"), dict):
        data = data["data"]
    return portfolio_from_dict(data)


def load_portfolio(path: Path | None = None) -> Portfolio:
    state_path = path or SETTINGS.state_path
    if not state_path.exists():
        return Portfolio()
    try:
        data = json.loads(state_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        logger.warning("State file %s is not valid JSON; starting empty", state_path)
        return Portfolio()
    return portfolio_from_dict(data)


def save_portfolio(portfolio: Portfolio, path: Path | None = None) -> Path:
    state_path = path or SETTINGS.state_path
    state_path.parent.mkdir(parents=True, exist_ok=True)
    state_path.write_text(
        json.dumps(portfolio_to_dict(portfolio), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    logger.debug(
        "Saved %d snapshots and %d events to %s",
        len(portfolio.snapshots),
        len(portfolio.events),
        state_path,
    )
    return state_path
