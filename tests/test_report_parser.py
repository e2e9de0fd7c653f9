from datetime import date
from decimal import Decimal

import pytest

from conftest import make_report
from fund_tracker.domain.results import MissingField
from fund_tracker.infrastructure.parsing.report import ReportParser, extract_date
from fund_tracker.infrastructure.parsing.utils import month_number, parse_money_like


def test_parses_multiline_portal_text(sample_report: str):
    outcome = ReportParser().parse(sample_report)

    assert outcome.ok
    assert outcome.missing == ()
    snapshot = outcome.snapshot
    assert snapshot.observed_date == date(2026, 1, 27)
    assert snapshot.total_value == Decimal("6329.87")
    assert snapshot.total_units == Decimal("1234.5678")
    assert snapshot.nav_per_unit == Decimal("5.1271")
    assert snapshot.one_year_return_pct == Decimal("3.07")
    assert snapshot.pending_buy == Decimal("0")
    assert snapshot.pending_sell == Decimal("0")
    assert outcome.fund_name == "ALFM Global Multi-Asset Income Fund Inc - PHP"


@pytest.mark.parametrize(
    "text, expected",
    [
        (
            "Total Investment Value P 6,329.87 as of Jan 27, 2026 | 3.07% 1 yr | "
            "Total Units 1,234.5678 | NAVPU 5.1271",
            (date(2026, 1, 27), "6329.87", "1234.5678", "5.1271", "3.07"),
        ),
        (
            "As Of December 29 2025\nTotal   Investment   Value\n\n  6329.87\n"
            "2.5% 1yr\nTotal Units: 1,200\nNAVPU P5.2749",
            (date(2025, 12, 29), "6329.87", "1200", "5.2749", "2.5"),
        ),
        (
            "NAVPU\nPHP 5.1000\nTotal Units\n100.0000\nTotal Investment Value\nPHP 510.00\n"
            "-1.2500% 1 YR\nas of Sept 5, 2025",
            (date(2025, 9, 5), "510.00", "100.0000", "5.1000", "-1.25"),
        ),
    ],
)
def test_layout_variants(text: str, expected: tuple):
    outcome = ReportParser().parse(text)

    assert outcome.ok, outcome.problems
    observed, value, units, nav, one_year = expected
    snapshot = outcome.snapshot
    assert snapshot.observed_date == observed
    assert snapshot.total_value == Decimal(value)
    assert snapshot.total_units == Decimal(units)
    assert snapshot.nav_per_unit == Decimal(nav)
    assert snapshot.one_year_return_pct == Decimal(one_year)


def test_missing_date_is_reported(sample_report: str):
    text = sample_report.replace("as of Jan 27, 2026", "")

    outcome = ReportParser().parse(text)

    assert not outcome.ok
    assert outcome.snapshot is None
    assert outcome.missing == (MissingField.DATE,)
    assert outcome.problems == ["Missing “as of” date"]


def test_missing_fields_listed_in_fixed_order():
    outcome = ReportParser().parse("nothing useful here")

    assert outcome.snapshot is None
    assert list(outcome.missing) == [
        MissingField.DATE,
        MissingField.VALUE,
        MissingField.UNITS,
        MissingField.NAV,
        MissingField.ONE_YEAR_RETURN,
    ]


def test_pending_orders_are_extracted():
    text = (
        "as of Jan 27, 2026 3.07% 1 yr Total Investment Value PHP 6,329.87 "
        "Total Units 1,234.5678 NAVPU PHP 5.1271 Pending Buy Order PHP 1,000.00 "
        "Pending Sell Orders P 250.50"
    )

    snapshot = ReportParser().parse(text).snapshot

    assert snapshot.pending_buy == Decimal("1000.00")
    assert snapshot.pending_sell == Decimal("250.50")


def test_source_text_is_trimmed_and_normalized(sample_report: str):
    text = "\r\n  " + sample_report.replace("\n", "\r\n") + "  \r\n"

    snapshot = ReportParser().parse(text).snapshot

    assert "\r" not in snapshot.source_text
    assert snapshot.source_text == sample_report.strip()


def test_each_parse_gets_fresh_identifier(sample_report: str):
    parser = ReportParser()

    first = parser.parse(sample_report).snapshot
    second = parser.parse(sample_report).snapshot

    assert first.id != second.id


def test_impossible_date_is_absent():
    assert extract_date("as of Feb 30, 2026") is None
    assert extract_date("as of Foo 12, 2026") is None


def test_thousands_separators_do_not_change_value():
    assert parse_money_like("6,329.87") == parse_money_like("6329.87") == Decimal("6329.87")


@pytest.mark.parametrize("raw", [None, "", "PHP", "--", "1.2.3", ",,"])
def test_unparseable_numbers_are_absent(raw):
    assert parse_money_like(raw) is None


def test_currency_markers_are_stripped():
    assert parse_money_like("PHP 6,329.87") == Decimal("6329.87")
    assert parse_money_like("P 0.00") == Decimal("0")


def test_month_names():
    assert month_number("Jan") == 1
    assert month_number("january") == 1
    assert month_number("Sept") == 9
    assert month_number("Dec.") == 12
    assert month_number("Ja") is None


def test_fund_heading_is_optional_and_whitespace_collapsed():
    heading = "alfm  global\nMulti-Asset Income Fund Inc -\nPHP\n"

    assert ReportParser().parse(heading + make_report()).fund_name == "alfm global Multi-Asset Income Fund Inc - PHP"
    assert ReportParser().parse(make_report()).fund_name is None
