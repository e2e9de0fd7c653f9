"""Command-line entrypoint for the fund tracker."""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

from fund_tracker.application.dto import DepositRequest, DividendRequest
from fund_tracker.application.use_cases import (
    DeleteLastSnapshotUseCase,
    ExplainHistoryUseCase,
    IngestSnapshotUseCase,
    LogDepositUseCase,
    LogDividendUseCase,
    TrackerContext,
)
from fund_tracker.config import SETTINGS
from fund_tracker.domain.errors import FundTrackerError
from fund_tracker.domain.models import PayoutMode
from fund_tracker.infrastructure.parsing.report import ReportParser
from fund_tracker.infrastructure.repositories.json_repository import JsonPortfolioRepository
from fund_tracker.infrastructure.storage.state_store import export_document, import_document
from fund_tracker.presentation.breakdown_report import breakdown_notes, latest_insight, portfolio_range_summary
from fund_tracker.presentation.formatting import fmt_money, fmt_num, fmt_pct
from fund_tracker.presentation.snapshot_report import render_csv

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _read_text(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Track fund snapshots and explain value changes")
    parser.add_argument("--state", type=Path, default=None, help="Path to the JSON state file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    parse_cmd = sub.add_parser("parse", help="Parse pasted report text without saving")
    parse_cmd.add_argument("source", help="Text file to parse, or - for stdin")

    add_cmd = sub.add_parser("add-snapshot", help="Parse report text and save the snapshot")
    add_cmd.add_argument("source", help="Text file to parse, or - for stdin")

    deposit_cmd = sub.add_parser("deposit", help="Log a deposit")
    deposit_cmd.add_argument("date", type=date.fromisoformat, help="Deposit date (YYYY-MM-DD)")
    deposit_cmd.add_argument("amount", help="Deposit amount")
    deposit_cmd.add_argument("--note", default="")

    dividend_cmd = sub.add_parser("dividend", help="Log a dividend")
    dividend_cmd.add_argument("date", type=date.fromisoformat, help="Dividend date (YYYY-MM-DD)")
    dividend_cmd.add_argument("amount", help="Dividend amount")
    dividend_cmd.add_argument("--mode", choices=[m.value for m in PayoutMode], required=True)
    dividend_cmd.add_argument("--nav", default=None, help="NAV used to convert a reinvested dividend")
    dividend_cmd.add_argument("--note", default="")

    sub.add_parser("breakdown", help="Explain every interval between adjacent snapshots")

    summary_cmd = sub.add_parser("summary", help="Show the latest insight and range cashflow summary")
    summary_cmd.add_argument("--range-days", type=int, default=None)

    csv_cmd = sub.add_parser("export-csv", help="Write snapshots as CSV")
    csv_cmd.add_argument("output", type=Path)

    export_cmd = sub.add_parser("export-json", help="Write the full state as JSON")
    export_cmd.add_argument("output", type=Path)

    import_cmd = sub.add_parser("import-json", help="Replace the state with an exported JSON document")
    import_cmd.add_argument("input", type=Path)

    sub.add_parser("delete-last", help="Delete the latest snapshot")
    return parser.parse_args(argv)


def _print_parse_problems(problems: list[str]) -> None:
    print("Could not fully parse:", file=sys.stderr)
    for problem in problems:
        print(f"- {problem}", file=sys.stderr)


def _run(args: argparse.Namespace, repository: JsonPortfolioRepository) -> int:
    context = TrackerContext(repository=repository)

    if args.command == "parse":
        outcome = ReportParser().parse(_read_text(args.source))
        if not outcome.ok:
            _print_parse_problems(outcome.problems)
            return 1
        snapshot = outcome.snapshot
        print(f"As of: {snapshot.observed_date.isoformat()}")
        print(f"Total value: {fmt_money(snapshot.total_value)}")
        print(f"Units: {fmt_num(snapshot.total_units)}")
        print(f"NAVPU: {fmt_money(snapshot.nav_per_unit)}")
        print(f"1Y return: {fmt_pct(snapshot.one_year_return_pct)}")
        print(f"Pending buy: {fmt_money(snapshot.pending_buy)}")
        print(f"Pending sell: {fmt_money(snapshot.pending_sell)}")
        return 0

    if args.command == "add-snapshot":
        response = IngestSnapshotUseCase(context).execute(_read_text(args.source))
        if not response.outcome.ok:
            _print_parse_problems(response.outcome.problems)
            return 1
        action = "Replaced" if response.replaced else "Saved"
        print(f"{action} snapshot for {response.outcome.snapshot.observed_date.isoformat()}")
        return 0

    if args.command == "deposit":
        event = LogDepositUseCase(context).execute(DepositRequest(on=args.date, amount=args.amount, note=args.note))
        print(f"Logged deposit of {fmt_money(event.amount)} on {event.date.isoformat()}")
        return 0

    if args.command == "dividend":
        event = LogDividendUseCase(context).execute(
            DividendRequest(
                on=args.date,
                amount=args.amount,
                payout_mode=args.mode,
                nav_override=args.nav,
                note=args.note,
            )
        )
        print(f"Logged {event.payout_mode.value} dividend of {fmt_money(event.amount)} on {event.date.isoformat()}")
        return 0

    if args.command == "breakdown":
        intervals = ExplainHistoryUseCase(context).execute()
        if not intervals:
            print("Add at least 2 snapshots to see a breakdown.")
            return 0
        for interval in intervals:
            breakdown = interval.breakdown
            print(f"{breakdown.previous_date.isoformat()} → {breakdown.current_date.isoformat()}: {breakdown.tag.label}")
            for note in breakdown_notes(breakdown):
                print(f"  {note}")
        return 0

    if args.command == "summary":
        portfolio = repository.load()
        print(latest_insight(portfolio, context.analyzer))
        print(portfolio_range_summary(portfolio, args.range_days))
        return 0

    if args.command == "export-csv":
        args.output.write_bytes(render_csv(repository.load().snapshots))
        print(f"Wrote {args.output}")
        return 0

    if args.command == "export-json":
        args.output.write_text(export_document(repository.load()), encoding="utf-8")
        print(f"Wrote {args.output}")
        return 0

    if args.command == "import-json":
        portfolio = import_document(args.input.read_text(encoding="utf-8"))
        repository.save(portfolio)
        print(f"Imported {len(portfolio.snapshots)} snapshots and {len(portfolio.events)} events")
        return 0

    if args.command == "delete-last":
        removed = DeleteLastSnapshotUseCase(context).execute()
        if removed is None:
            print("No snapshots to delete.")
        else:
            print(f"Deleted snapshot for {removed.observed_date.isoformat()}")
        return 0

    raise AssertionError(f"Unhandled command {args.command!r}")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    _configure_logging(args.verbose)
    repository = JsonPortfolioRepository(args.state or SETTINGS.state_path)
    try:
        return _run(args, repository)
    except FundTrackerError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Command %s could not read or write a file", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
