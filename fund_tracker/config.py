"""Central configuration for the fund tracker package."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from decimal import Context, Decimal
from pathlib import Path

DEFAULT_FUND_NAME = "ALFM Global Multi-Asset Income Fund Inc - PHP"

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"
DEFAULT_STATE_PATH = DATA_DIR / "fund_tracker_state.json"


@dataclass(slots=True, frozen=True)
class Settings:
    decimal_context: Context
    # Units are considered unchanged when |delta| <= unit_epsilon.
    unit_epsilon: Decimal
    # Absolute money tolerance before an implied/logged cashflow gap is flagged.
    gap_tolerance: Decimal
    currency_symbol: str
    default_fund_name: str
    state_path: Path

    @classmethod
    def from_env(cls, base: "Settings | None" = None) -> "Settings":
        settings = base or DEFAULT_SETTINGS
        overrides: dict[str, object] = {}
        if state := os.environ.get("FUND_TRACKER_STATE"):
            overrides["state_path"] = Path(state).expanduser()
        if tolerance := os.environ.get("FUND_TRACKER_GAP_TOLERANCE"):
            overrides["gap_tolerance"] = Decimal(tolerance)
        if epsilon := os.environ.get("FUND_TRACKER_UNIT_EPSILON"):
            overrides["unit_epsilon"] = Decimal(epsilon)
        return replace(settings, **overrides) if overrides else settings


DEFAULT_SETTINGS = Settings(
    decimal_context=Context(prec=28),
    unit_epsilon=Decimal("1e-9"),
    gap_tolerance=Decimal("2"),
    currency_symbol="₱",
    default_fund_name=DEFAULT_FUND_NAME,
    state_path=DEFAULT_STATE_PATH,
)

SETTINGS = Settings.from_env(DEFAULT_SETTINGS)
