"""
tests/test_field_parsers.py

Pytest unit tests for milestone cell parsers. All parsers are total: no
input may raise.
"""

from __future__ import annotations

from datetime import date

import pytest

from app.domain.milestone_import import MilestoneStatus
from app.parsers.field_parsers import (
    extract_contract_number,
    parse_deadline,
    parse_percentage,
    parse_status,
    parse_text,
)


# ---------------------------------------------------------------------------
# parse_percentage
# ---------------------------------------------------------------------------


class TestParsePercentage:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("100%", 100),
            ("0%", 0),
            ("85%", 85),
            (" 75% ", 75),
            ("invalid", 0),
            ("", 0),
            (None, 0),
        ],
    )
    def test_documented_examples(self, value: str | None, expected: int) -> None:
        assert parse_percentage(value) == expected

    @pytest.mark.parametrize(("value", "expected"), [("150%", 100), ("-20", 0), ("1e9", 100)])
    def test_out_of_range_values_are_clamped(self, value: str, expected: int) -> None:
        assert parse_percentage(value) == expected

    @pytest.mark.parametrize("value", ["NaN", "inf", "-Infinity", "%", "12%%"])
    def test_non_finite_or_garbled_values_yield_zero(self, value: str) -> None:
        assert parse_percentage(value) == 0

    def test_rounds_half_up(self) -> None:
        assert parse_percentage("42.5%") == 43
        assert parse_percentage("42.4") == 42

    def test_decimal_comma_is_accepted(self) -> None:
        assert parse_percentage("85,5%") == 86

    def test_numeric_input(self) -> None:
        assert parse_percentage(60) == 60


# ---------------------------------------------------------------------------
# parse_deadline
# ---------------------------------------------------------------------------


class TestParseDeadline:
    @pytest.mark.parametrize(
        "value",
        [
            "2017-10-26",
            "2017-10-26T08:30:00",
            "2017-10-26T08:30:00Z",
            "October 26, 2017",
            "Oct 26, 2017",
            "26/10/2017",
            "26.10.2017",
            "26-10-2017",
            "2017/10/26",
        ],
    )
    def test_supported_formats(self, value: str) -> None:
        assert parse_deadline(value) == date(2017, 10, 26)

    @pytest.mark.parametrize("value", [None, "", "   ", "soon", "31/02/2017"])
    def test_empty_or_unparseable_is_none(self, value: str | None) -> None:
        assert parse_deadline(value) is None


# ---------------------------------------------------------------------------
# parse_status
# ---------------------------------------------------------------------------


class TestParseStatus:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("Planning", MilestoneStatus.PLANNING),
            ("in progress", MilestoneStatus.IN_PROGRESS),
            ("IN_PROGRESS", MilestoneStatus.IN_PROGRESS),
            ("In-Progress", MilestoneStatus.IN_PROGRESS),
            ("completed", MilestoneStatus.COMPLETED),
            ("Done", MilestoneStatus.COMPLETED),
            ("At Risk", MilestoneStatus.DELAYED),
            ("Canceled", MilestoneStatus.CANCELLED),
            ("Not Started", MilestoneStatus.PLANNING),
        ],
    )
    def test_known_values(self, value: str, expected: MilestoneStatus) -> None:
        result = parse_status(value)
        assert result.status is expected
        assert result.recognized

    def test_empty_defaults_silently(self) -> None:
        result = parse_status("  ")
        assert result.status is MilestoneStatus.PLANNING
        assert result.recognized

    def test_unknown_defaults_with_flag(self) -> None:
        result = parse_status("Bogus")
        assert result.status is MilestoneStatus.PLANNING
        assert not result.recognized


# ---------------------------------------------------------------------------
# parse_text / extract_contract_number
# ---------------------------------------------------------------------------


def test_parse_text_strips_line_breaks_and_whitespace() -> None:
    assert parse_text("  Design\r\n review ") == "Design review"
    assert parse_text("\r\n") is None
    assert parse_text(None) is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Harbour Expansion [C-2017-044]", "C-2017-044"),
        ("Harbour Expansion [ ]", None),
        ("Harbour Expansion", None),
        (None, None),
    ],
)
def test_extract_contract_number(value: str | None, expected: str | None) -> None:
    assert extract_contract_number(value) == expected
