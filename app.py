"""Streamlit front-end for the fund snapshot tracker."""
from __future__ import annotations

import logging
from datetime import date

import pandas as pd
import streamlit as st

from fund_tracker import (
    BreakdownAnalyzer,
    IngestSnapshotUseCase,
    JsonPortfolioRepository,
    LogDepositUseCase,
    LogDividendUseCase,
    TrackerContext,
)
from fund_tracker.application.dto import DepositRequest, DividendRequest
from fund_tracker.application.use_cases import DeleteLastSnapshotUseCase, ResetPortfolioUseCase
from fund_tracker.config import SETTINGS
from fund_tracker.domain.errors import FundTrackerError
from fund_tracker.domain.models import PayoutMode
from fund_tracker.domain.portfolio import Portfolio
from fund_tracker.infrastructure.storage.state_store import export_document, import_document
from fund_tracker.presentation.breakdown_report import latest_insight, portfolio_range_summary, timeline_entries
from fund_tracker.presentation.formatting import fmt_money, fmt_num, fmt_pct, nice_date
from fund_tracker.presentation.snapshot_report import (
    SORT_KEYS,
    render_csv,
    render_xlsx,
    snapshots_to_dataframe,
    snapshots_to_rows,
)

logger = logging.getLogger(__name__)

RANGE_OPTIONS = {"All": None, "30 days": 30, "90 days": 90, "180 days": 180, "365 days": 365}


def _configure_logging() -> None:
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def build_context() -> TrackerContext:
    return TrackerContext(repository=JsonPortfolioRepository(SETTINGS.state_path))


def render_kpis(portfolio: Portfolio, analyzer: BreakdownAnalyzer) -> None:
    snapshots = portfolio.sorted_snapshots()
    st.caption(portfolio.fund_name)
    if not snapshots:
        st.info("No snapshots yet. Paste your portal text to get started.")
        return

    last = snapshots[-1]
    prev = snapshots[-2] if len(snapshots) > 1 else None
    st.subheader(f"As of {nice_date(last.observed_date)}")

    cols = st.columns(4)
    cols[0].metric(
        "Total value",
        fmt_money(last.total_value),
        fmt_money(last.total_value - prev.total_value) if prev else None,
    )
    cols[1].metric(
        "Units",
        fmt_num(last.total_units),
        fmt_num(last.total_units - prev.total_units) if prev else None,
    )
    cols[2].metric(
        "NAVPU",
        fmt_money(last.nav_per_unit),
        fmt_money(last.nav_per_unit - prev.nav_per_unit) if prev else None,
    )
    cols[3].metric(
        "1Y return",
        fmt_pct(last.one_year_return_pct),
        fmt_pct(last.one_year_return_pct - prev.one_year_return_pct) if prev else None,
    )
    st.write(latest_insight(portfolio, analyzer))


def render_paste_box(context: TrackerContext) -> None:
    st.subheader("Paste snapshot")
    flash = st.session_state.pop("flash", None)
    if flash:
        st.success(flash)
    text = st.text_area("Portal text", key="paste_box", height=200)
    if st.button("Parse & save", key="parse_save_btn"):
        if not text.strip():
            st.warning("Paste your portal text first.")
            return
        response = IngestSnapshotUseCase(context).execute(text)
        if not response.outcome.ok:
            st.error("Could not fully parse:\n" + "\n".join(f"- {p}" for p in response.outcome.problems))
            return
        observed = response.outcome.snapshot.observed_date.isoformat()
        # Shown on the next run, after the rerun refreshes the page.
        st.session_state["flash"] = f"Parsed OK. {'Replaced' if response.replaced else 'Saved'} snapshot for {observed}."
        st.rerun()


def render_event_forms(context: TrackerContext) -> None:
    st.subheader("Log event")
    deposit_tab, dividend_tab = st.tabs(["Deposit", "Dividend"])
    with deposit_tab:
        with st.form("deposit_form", clear_on_submit=True):
            on = st.date_input("Date", value=date.today(), key="dep_date")
            amount = st.text_input("Amount", key="dep_amount")
            note = st.text_input("Note", key="dep_note")
            submitted = st.form_submit_button("Add deposit")
        if submitted:
            try:
                LogDepositUseCase(context).execute(DepositRequest(on=on, amount=amount, note=note))
            except FundTrackerError as exc:
                st.error(str(exc))
            else:
                st.rerun()
    with dividend_tab:
        with st.form("dividend_form", clear_on_submit=True):
            on = st.date_input("Date", value=date.today(), key="div_date")
            amount = st.text_input("Amount", key="div_amount")
            mode = st.selectbox("Type", [m.value for m in PayoutMode], key="div_mode")
            nav_override = st.text_input("NAV override (optional)", key="div_nav")
            note = st.text_input("Note", key="div_note")
            submitted = st.form_submit_button("Add dividend")
        if submitted:
            try:
                LogDividendUseCase(context).execute(
                    DividendRequest(
                        on=on,
                        amount=amount,
                        payout_mode=mode,
                        nav_override=nav_override or None,
                        note=note,
                    )
                )
            except FundTrackerError as exc:
                st.error(str(exc))
            else:
                st.rerun()


def render_charts(portfolio: Portfolio, range_days: int | None) -> None:
    frame = snapshots_to_dataframe(portfolio.snapshots_in_range(range_days))
    if len(frame) < 2:
        st.caption("Not enough data for charts.")
        return
    cols = st.columns(3)
    for col, column, title in zip(
        cols,
        ("navpu", "totalValue", "units"),
        ("NAVPU (PHP)", "Total Value (PHP)", "Units"),
    ):
        with col:
            st.caption(title)
            st.line_chart(frame[column])


def render_timeline(portfolio: Portfolio, analyzer: BreakdownAnalyzer) -> None:
    entries = timeline_entries(portfolio, analyzer)
    if not entries:
        st.caption("No records yet. Paste a snapshot or add an event.")
        return
    for entry in entries:
        with st.container(border=True):
            st.markdown(f"**{entry.title}** `{entry.badge}`")
            st.text(entry.subtitle)
            for detail in entry.details:
                st.caption(detail)


def render_records(portfolio: Portfolio, analyzer: BreakdownAnalyzer) -> None:
    col_search, col_sort, col_dir = st.columns([3, 1, 1])
    with col_search:
        query = st.text_input("Search date or raw text", key="records_search")
    with col_sort:
        sort_key = st.selectbox("Sort by", list(SORT_KEYS), key="records_sort")
    with col_dir:
        descending = st.selectbox("Order", ["desc", "asc"], key="records_dir") == "desc"
    rows = snapshots_to_rows(portfolio, analyzer, query=query, sort_key=sort_key, descending=descending)
    if not rows:
        st.caption("No snapshots found.")
        return
    st.dataframe(pd.DataFrame(rows), hide_index=True)


def render_data_tools(context: TrackerContext, portfolio: Portfolio) -> None:
    today = date.today().isoformat()
    cols = st.columns(3)
    cols[0].download_button(
        "Export JSON",
        data=export_document(portfolio).encode("utf-8"),
        file_name=f"fund-tracker-{today}.json",
        mime="application/json",
    )
    cols[1].download_button(
        "Export CSV",
        data=render_csv(portfolio.snapshots),
        file_name=f"fund-snapshots-{today}.csv",
        mime="text/csv",
    )
    cols[2].download_button(
        "Export XLSX",
        data=render_xlsx(portfolio.snapshots),
        file_name=f"fund-snapshots-{today}.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )

    uploaded = st.file_uploader("Import JSON", type=["json"], key="import_file")
    if uploaded is not None and st.button("Import", key="import_btn"):
        try:
            imported = import_document(uploaded.read().decode("utf-8"))
        except FundTrackerError as exc:
            st.error(f"Import failed: {exc}")
        else:
            context.repository.save(imported)
            st.success("Import successful.")
            st.rerun()

    col_delete, col_reset = st.columns(2)
    with col_delete:
        if st.button("Delete last snapshot", key="delete_last_btn"):
            DeleteLastSnapshotUseCase(context).execute()
            st.rerun()
    with col_reset:
        confirm = st.checkbox("I understand this deletes all snapshots and events", key="reset_confirm")
        if st.button("Reset everything", key="reset_btn", disabled=not confirm):
            ResetPortfolioUseCase(context).execute()
            st.rerun()


def main() -> None:
    _configure_logging()
    st.set_page_config(page_title="Fund Tracker", layout="wide")
    st.title("Fund Snapshot Tracker")

    context = build_context()
    try:
        portfolio = context.repository.load()
    except FundTrackerError as exc:
        logger.exception("Failed to load state")
        st.error(f"Could not load saved state: {exc}")
        st.stop()
    analyzer = context.analyzer

    render_kpis(portfolio, analyzer)

    left, right = st.columns(2)
    with left:
        render_paste_box(context)
    with right:
        render_event_forms(context)

    range_label = st.selectbox("Range", list(RANGE_OPTIONS), key="range_select")
    range_days = RANGE_OPTIONS[range_label]
    st.write(portfolio_range_summary(portfolio, range_days))
    render_charts(portfolio, range_days)

    timeline_tab, records_tab, data_tab = st.tabs(["Timeline", "Records", "Data"])
    with timeline_tab:
        render_timeline(portfolio, analyzer)
    with records_tab:
        render_records(portfolio, analyzer)
    with data_tab:
        render_data_tools(context, portfolio)


main()
