"""
tests/test_config.py

Environment-driven milestone import settings.
"""

from __future__ import annotations

import pytest

from app.config import get_milestone_import_settings, normalize_delimiter


def test_defaults(monkeypatch) -> None:
    for name in (
        "MILESTONE_IMPORT_DELIMITER",
        "MILESTONE_IMPORT_ENCODING",
        "MILESTONE_IMPORT_MAX_RECORDED_ISSUES",
        "MILESTONE_IMPORT_LOG_REJECTIONS",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = get_milestone_import_settings()

    assert settings.delimiter == ";"
    assert settings.encoding == "utf-8-sig"
    assert settings.max_recorded_issues == 500
    assert settings.log_rejections is True


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("MILESTONE_IMPORT_DELIMITER", "auto")
    monkeypatch.setenv("MILESTONE_IMPORT_ENCODING", "cp1252")
    monkeypatch.setenv("MILESTONE_IMPORT_MAX_RECORDED_ISSUES", "25")
    monkeypatch.setenv("MILESTONE_IMPORT_LOG_REJECTIONS", "off")

    settings = get_milestone_import_settings()

    assert (settings.delimiter, settings.encoding) == ("auto", "cp1252")
    assert settings.max_recorded_issues == 25
    assert settings.log_rejections is False


def test_invalid_values_fall_back(monkeypatch) -> None:
    monkeypatch.setenv("MILESTONE_IMPORT_DELIMITER", "|")
    monkeypatch.setenv("MILESTONE_IMPORT_MAX_RECORDED_ISSUES", "lots")

    settings = get_milestone_import_settings()

    assert settings.delimiter == ";"
    assert settings.max_recorded_issues == 500


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, ";"),
        (",", ","),
        ("\t", "\t"),
        ("\\t", "\t"),
        ("TAB", "\t"),
        ("comma", ","),
        (" AUTO ", "auto"),
        ("|", ";"),
    ],
)
def test_normalize_delimiter(value: str | None, expected: str) -> None:
    assert normalize_delimiter(value) == expected
