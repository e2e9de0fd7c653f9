"""JSON-file backed repository for the portfolio."""
from __future__ import annotations

from pathlib import Path

from fund_tracker.domain.portfolio import Portfolio
from fund_tracker.domain.repositories import PortfolioRepository
from fund_tracker.infrastructure.storage.state_store import load_portfolio, save_portfolio


class JsonPortfolioRepository(PortfolioRepository):
    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Portfolio:
        return load_portfolio(self._path)

    def save(self, portfolio: Portfolio) -> None:
        save_portfolio(portfolio, self._path)


class InMemoryPortfolioRepository(PortfolioRepository):
    def __init__(self, portfolio: Portfolio | None = None) -> None:
        self._portfolio = portfolio or Portfolio()

    def load(self) -> Portfolio:
        return self._portfolio

    def save(self, portfolio: Portfolio) -> None:
        self._portfolio = portfolio
