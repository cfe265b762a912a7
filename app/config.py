"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

SUPPORTED_DELIMITERS: tuple[str, ...] = (";", ",", "\t")
AUTO_DELIMITER = "auto"
DEFAULT_DELIMITER = ";"


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def normalize_delimiter(value: str | None, default: str = DEFAULT_DELIMITER) -> str:
    """
    Map a configured delimiter onto ``;``, ``,``, tab or ``auto``.

    Accepts the spellings ``\\t``, ``tab``, ``semicolon`` and ``comma``;
    anything else falls back to ``default``.
    """

    if value is None:
        return default
    raw = value if value in SUPPORTED_DELIMITERS else value.strip()
    aliases = {
        "\\t": "\t",
        "tab": "\t",
        "semicolon": ";",
        "comma": ",",
    }
    candidate = aliases.get(raw.lower(), raw)
    if candidate.lower() == AUTO_DELIMITER:
        return AUTO_DELIMITER
    if candidate in SUPPORTED_DELIMITERS:
        return candidate
    return default


@dataclass(frozen=True)
class MilestoneImportSettings:
    """
    Runtime settings for milestone CSV imports.
    """

    delimiter: str = DEFAULT_DELIMITER
    encoding: str = "utf-8-sig"
    max_recorded_issues: int = 500
    log_rejections: bool = True


@lru_cache(maxsize=1)
def get_milestone_import_settings() -> MilestoneImportSettings:
    """
    Return cached milestone import settings from environment variables.
    """

    _load_env_once()
    return MilestoneImportSettings(
        delimiter=normalize_delimiter(os.getenv("MILESTONE_IMPORT_DELIMITER")),
        encoding=_get_str_env("MILESTONE_IMPORT_ENCODING", "utf-8-sig"),
        max_recorded_issues=max(1, _get_int_env("MILESTONE_IMPORT_MAX_RECORDED_ISSUES", 500)),
        log_rejections=_get_bool_env("MILESTONE_IMPORT_LOG_REJECTIONS", True),
    )
