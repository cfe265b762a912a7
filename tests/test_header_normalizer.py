"""
tests/test_header_normalizer.py

Pytest unit tests for the milestone header normalizer.
"""

from __future__ import annotations

import pytest

from app.mappers.header_normalizer import clean_header, normalize_headers


class TestCanonicalMatching:
    @pytest.mark.parametrize("header", [" PROGRESS", "PROGRESS", "progress", "Progress\r\n"])
    def test_progress_variants_map_to_same_field(self, header: str) -> None:
        mapping = normalize_headers([header])
        assert mapping.fields == ("progress",)
        assert mapping.unrecognized == ()

    def test_leading_bom_is_stripped_from_first_header(self) -> None:
        mapping = normalize_headers(["\ufeffPROJECT", "MILESTONE"])
        assert mapping.fields == ("project", "milestone")

    def test_bom_is_only_stripped_from_first_header(self) -> None:
        assert clean_header("\ufeffSTATUS", first=False) == "\ufeffSTATUS"
        assert clean_header("\ufeffSTATUS", first=True) == "STATUS"

    def test_alias_headers_are_recognized(self) -> None:
        mapping = normalize_headers(["Project Name", "Title", "Due Date", "Milestone Status"])
        assert mapping.fields == ("project", "milestone", "deadline", "status")

    def test_normalization_is_deterministic(self) -> None:
        headers = ["PROJECT", " Milestone ", "DEADLINE", "OWNER"]
        assert normalize_headers(headers) == normalize_headers(headers)


class TestUnrecognizedHeaders:
    def test_unknown_header_is_kept_lowercased(self) -> None:
        mapping = normalize_headers(["PROJECT", " Owner "])
        assert mapping.fields == ("project", "owner")
        assert mapping.unrecognized == ("owner",)

    def test_second_header_for_same_field_is_unrecognized(self) -> None:
        mapping = normalize_headers(["PROJECT", "Project Name"])
        assert mapping.fields == ("project", "project name")
        assert mapping.unrecognized == ("project name",)
        assert mapping.canonical_by_raw == {"PROJECT": "project"}

    def test_trailing_delimiter_column_is_not_reported(self) -> None:
        mapping = normalize_headers(["PROJECT", "MILESTONE", ""])
        assert mapping.fields == ("project", "milestone", "")
        assert mapping.unrecognized == ()

    def test_header_without_known_fields(self) -> None:
        mapping = normalize_headers(["foo", "bar"])
        assert not mapping.has_recognized_fields
        assert mapping.recognized_fields == ()


class TestRowMapping:
    def test_map_row_returns_all_canonical_keys(self) -> None:
        mapping = normalize_headers(["PROJECT", "MILESTONE", "OWNER"])
        raw_row = mapping.build_raw_row(["Alpha", "Kickoff", "Dana"])
        assert mapping.map_row(raw_row) == {
            "project": "Alpha",
            "milestone": "Kickoff",
            "deadline": None,
            "progress": None,
            "status": None,
        }

    def test_short_line_leaves_missing_cells_none(self) -> None:
        mapping = normalize_headers(["PROJECT", "MILESTONE", "PROGRESS"])
        raw_row = mapping.build_raw_row(["Alpha"])
        assert raw_row == {"PROJECT": "Alpha", "MILESTONE": None, "PROGRESS": None}

    def test_duplicate_raw_header_keeps_first_cell(self) -> None:
        mapping = normalize_headers(["PROJECT", "MILESTONE", "MILESTONE"])
        raw_row = mapping.build_raw_row(["Alpha", "First", "Second"])
        assert mapping.map_row(raw_row)["milestone"] == "First"
