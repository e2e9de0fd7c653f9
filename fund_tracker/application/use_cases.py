"""Application services orchestrating the fund tracker workflows."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from fund_tracker.application.dto import (
    DepositRequest,
    DividendRequest,
    IngestResponse,
    IntervalBreakdown,
)
from fund_tracker.domain.errors import InvalidEventError
from fund_tracker.domain.models import Event, PayoutMode, Snapshot
from fund_tracker.domain.repositories import PortfolioRepository
from fund_tracker.domain.services import BreakdownAnalyzer
from fund_tracker.infrastructure.parsing.report import ReportParser
from fund_tracker.infrastructure.parsing.utils import parse_money_like

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TrackerContext:
    repository: PortfolioRepository
    parser: ReportParser = field(default_factory=ReportParser)
    analyzer: BreakdownAnalyzer = field(default_factory=BreakdownAnalyzer)


def _positive_amount(raw: Decimal | str, label: str) -> Decimal:
    amount = raw if isinstance(raw, Decimal) else parse_money_like(raw)
    if amount is None or not amount.is_finite() or amount <= 0:
        raise InvalidEventError(f"Enter a valid {label} amount (got {raw!r})")
    return amount


def _payout_mode(raw: PayoutMode | str) -> PayoutMode:
    if isinstance(raw, PayoutMode):
        return raw
    try:
        return PayoutMode(str(raw).strip().lower())
    except ValueError as exc:
        raise InvalidEventError(f"Dividend payout mode must be 'cash' or 'reinvest', got {raw!r}") from exc


class IngestSnapshotUseCase:
    def __init__(self, context: TrackerContext) -> None:
        self._context = context

    def execute(self, text: str) -> IngestResponse:
        outcome = self._context.parser.parse(text)
        if not outcome.ok:
            return IngestResponse(outcome=outcome)

        portfolio = self._context.repository.load()
        if outcome.fund_name:
            portfolio.fund_name = outcome.fund_name
        replaced = portfolio.upsert_snapshot(outcome.snapshot)
        self._context.repository.save(portfolio)
        if replaced is not None:
            logger.info("Replaced snapshot for %s", replaced.observed_date.isoformat())
        return IngestResponse(outcome=outcome, replaced=replaced)


class LogDepositUseCase:
    def __init__(self, context: TrackerContext) -> None:
        self._context = context

    def execute(self, request: DepositRequest) -> Event:
        event = Event.deposit(
            request.on,
            _positive_amount(request.amount, "deposit"),
            note=request.note.strip(),
        )
        portfolio = self._context.repository.load()
        portfolio.add_event(event)
        self._context.repository.save(portfolio)
        return event


class LogDividendUseCase:
    def __init__(self, context: TrackerContext) -> None:
        self._context = context

    def execute(self, request: DividendRequest) -> Event:
        nav_override = request.nav_override
        if nav_override is not None and not isinstance(nav_override, Decimal):
            nav_override = parse_money_like(nav_override)
        event = Event.dividend(
            request.on,
            _positive_amount(request.amount, "dividend"),
            _payout_mode(request.payout_mode),
            nav_override=nav_override,
            note=request.note.strip(),
        )
        portfolio = self._context.repository.load()
        portfolio.add_event(event)
        self._context.repository.save(portfolio)
        return event


class ExplainHistoryUseCase:
    def __init__(self, context: TrackerContext) -> None:
        self._context = context

    def execute(self) -> list[IntervalBreakdown]:
        portfolio = self._context.repository.load()
        snapshots = portfolio.sorted_snapshots()
        return [
            IntervalBreakdown(
                previous=previous,
                current=current,
                breakdown=self._context.analyzer.explain_interval(
                    previous, current, portfolio.events, snapshots=snapshots
                ),
            )
            for previous, current in portfolio.adjacent_pairs()
        ]


class DeleteLastSnapshotUseCase:
    def __init__(self, context: TrackerContext) -> None:
        self._context = context

    def execute(self) -> Snapshot | None:
        portfolio = self._context.repository.load()
        removed = portfolio.delete_last_snapshot()
        if removed is not None:
            self._context.repository.save(portfolio)
        return removed


class ResetPortfolioUseCase:
    def __init__(self, context: TrackerContext) -> None:
        self._context = context

    def execute(self) -> None:
        portfolio = self._context.repository.load()
        portfolio.clear()
        self._context.repository.save(portfolio)
