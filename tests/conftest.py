from datetime import date
from decimal import Decimal

import pytest

from fund_tracker.domain.models import Snapshot

SAMPLE_REPORT = """ALFM Global Multi-Asset Income Fund Inc - PHP
Total Investment Value
PHP 6,329.87
as of Jan 27, 2026
3.0700% 1 yr

Total Units
1,234.5678
NAVPU
PHP 5.1271
Pending Buy Orders
PHP 0.00
Pending Sell Orders
PHP 0.00
"""


def make_report(day: str = "Jan 27, 2026", value: str = "6,329.87", units: str = "1,234.5678", nav: str = "5.1271") -> str:
    return (
        f"Total Investment Value\nPHP {value}\nas of {day}\n3.0700% 1 yr\n"
        f"Total Units\n{units}\nNAVPU\nPHP {nav}\n"
    )


def make_snapshot(on: date, nav: str, units: str, value: str | None = None, one_year: str = "3.07") -> Snapshot:
    nav_d = Decimal(nav)
    units_d = Decimal(units)
    return Snapshot(
        observed_date=on,
        nav_per_unit=nav_d,
        total_units=units_d,
        total_value=Decimal(value) if value is not None else nav_d * units_d,
        one_year_return_pct=Decimal(one_year),
    )


@pytest.fixture
def sample_report() -> str:
    return SAMPLE_REPORT
