"""Fund snapshot parsing and value-change attribution toolkit."""
from fund_tracker.application.use_cases import (
    ExplainHistoryUseCase,
    IngestSnapshotUseCase,
    LogDepositUseCase,
    LogDividendUseCase,
    TrackerContext,
)
from fund_tracker.domain.models import Event, EventKind, PayoutMode, Snapshot
from fund_tracker.domain.portfolio import Portfolio
from fund_tracker.domain.results import Breakdown, BreakdownTag, MissingField, ParseOutcome
from fund_tracker.domain.services import BreakdownAnalyzer
from fund_tracker.infrastructure.parsing.report import ReportParser
from fund_tracker.infrastructure.repositories.json_repository import JsonPortfolioRepository

__all__ = [
    "Breakdown",
    "BreakdownAnalyzer",
    "BreakdownTag",
    "Event",
    "EventKind",
    "ExplainHistoryUseCase",
    "IngestSnapshotUseCase",
    "JsonPortfolioRepository",
    "LogDepositUseCase",
    "LogDividendUseCase",
    "MissingField",
    "ParseOutcome",
    "PayoutMode",
    "Portfolio",
    "ReportParser",
    "Snapshot",
    "TrackerContext",
]
