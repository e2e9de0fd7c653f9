"""Repository interfaces anchoring the domain layer."""
from __future__ import annotations

from typing import Protocol

from .portfolio import Portfolio


class PortfolioRepository(Protocol):
    """Loads and persists the caller's portfolio collection."""

    def load(self) -> Portfolio:
        ...

    def save(self, portfolio: Portfolio) -> None:
        ...
