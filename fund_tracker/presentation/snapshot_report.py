"""Tabular snapshot reports: records table, CSV and XLSX exports."""
from __future__ import annotations

import csv
import io
from typing import Sequence

import pandas as pd

from fund_tracker.domain.models import Snapshot
from fund_tracker.domain.portfolio import Portfolio
from fund_tracker.domain.services import BreakdownAnalyzer
from fund_tracker.presentation.breakdown_report import breakdown_notes
from fund_tracker.presentation.formatting import fmt_money, fmt_num, fmt_pct

CSV_COLUMNS = ["asOf", "totalValue", "units", "navpu", "oneYearReturn", "pendingBuy", "pendingSell"]

SORT_KEYS = {
    "date": lambda s: s.observed_date,
    "value": lambda s: s.total_value,
    "units": lambda s: s.total_units,
    "nav": lambda s: s.nav_per_unit,
    "oneYear": lambda s: s.one_year_return_pct,
}


def filter_snapshots(snapshots: Sequence[Snapshot], query: str | None) -> list[Snapshot]:
    """Case-insensitive match against the ISO date or the retained source text."""
    pattern = (query or "").strip().lower()
    if not pattern:
        return list(snapshots)
    return [
        s for s in snapshots if pattern in s.observed_date.isoformat() or pattern in s.source_text.lower()
    ]


def snapshots_to_rows(
    portfolio: Portfolio,
    analyzer: BreakdownAnalyzer | None = None,
    query: str | None = None,
    sort_key: str = "date",
    descending: bool = True,
) -> list[dict[str, str]]:
    analyzer = analyzer or BreakdownAnalyzer()
    ordered = portfolio.sorted_snapshots()
    key = SORT_KEYS.get(sort_key, SORT_KEYS["date"])
    selected = sorted(filter_snapshots(ordered, query), key=key, reverse=descending)

    rows: list[dict[str, str]] = []
    for snapshot in selected:
        previous = portfolio.previous_of(snapshot)
        analysis = "First snapshot"
        if previous is not None:
            breakdown = analyzer.explain_interval(previous, snapshot, portfolio.events, snapshots=ordered)
            analysis = f"{breakdown.tag.label}. {breakdown_notes(breakdown)[0]}"
        rows.append(
            {
                "date": snapshot.observed_date.isoformat(),
                "value": fmt_money(snapshot.total_value),
                "units": fmt_num(snapshot.total_units),
                "navpu": fmt_money(snapshot.nav_per_unit),
                "one_year": fmt_pct(snapshot.one_year_return_pct),
                "pending_buy": fmt_money(snapshot.pending_buy),
                "pending_sell": fmt_money(snapshot.pending_sell),
                "analysis": analysis,
            }
        )
    return rows


def render_csv(snapshots: Sequence[Snapshot]) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for snapshot in sorted(snapshots, key=lambda s: s.observed_date):
        writer.writerow(
            [
                snapshot.observed_date.isoformat(),
                str(snapshot.total_value),
                str(snapshot.total_units),
                str(snapshot.nav_per_unit),
                str(snapshot.one_year_return_pct),
                str(snapshot.pending_buy),
                str(snapshot.pending_sell),
            ]
        )
    return buffer.getvalue().encode("utf-8")


def snapshots_to_dataframe(snapshots: Sequence[Snapshot]) -> pd.DataFrame:
    """Numeric frame indexed by observation date, used for charts and spreadsheets."""
    ordered = sorted(snapshots, key=lambda s: s.observed_date)
    frame = pd.DataFrame(
        [
            {
                "asOf": s.observed_date,
                "totalValue": float(s.total_value),
                "units": float(s.total_units),
                "navpu": float(s.nav_per_unit),
                "oneYearReturn": float(s.one_year_return_pct),
                "pendingBuy": float(s.pending_buy),
                "pendingSell": float(s.pending_sell),
            }
            for s in ordered
        ],
        columns=CSV_COLUMNS,
    )
    frame["asOf"] = pd.to_datetime(frame["asOf"])
    return frame.set_index("asOf")


def render_xlsx(snapshots: Sequence[Snapshot], sheet_name: str = "Snapshots") -> bytes:
    frame = snapshots_to_dataframe(snapshots).reset_index()
    frame["asOf"] = frame["asOf"].dt.date
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="xlsxwriter") as writer:
        frame.to_excel(writer, sheet_name=sheet_name, index=False)
    buf.seek(0)
    return buf.getvalue()
