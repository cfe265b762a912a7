"""
app/parsers/field_parsers.py

Pure, total parsers turning raw milestone CSV cells into typed values.

None of these functions raise: garbled progress, dates and statuses are
common in the source exports and are repaired with defaults instead.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from app.domain.milestone_import import DEFAULT_MILESTONE_STATUS, MilestoneStatus

MIN_PERCENTAGE = 0
MAX_PERCENTAGE = 100

DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d/%m/%Y",
    "%d.%m.%Y",
    "%d-%m-%Y",
    "%Y/%m/%d",
)

# Keys are lower-case with spaces, "_" and "-" removed.
STATUS_VOCABULARY: dict[str, MilestoneStatus] = {
    "planning": MilestoneStatus.PLANNING,
    "planned": MilestoneStatus.PLANNING,
    "notstarted": MilestoneStatus.PLANNING,
    "pending": MilestoneStatus.PLANNING,
    "inprogress": MilestoneStatus.IN_PROGRESS,
    "ongoing": MilestoneStatus.IN_PROGRESS,
    "started": MilestoneStatus.IN_PROGRESS,
    "completed": MilestoneStatus.COMPLETED,
    "complete": MilestoneStatus.COMPLETED,
    "done": MilestoneStatus.COMPLETED,
    "delayed": MilestoneStatus.DELAYED,
    "atrisk": MilestoneStatus.DELAYED,
    "overdue": MilestoneStatus.DELAYED,
    "cancelled": MilestoneStatus.CANCELLED,
    "canceled": MilestoneStatus.CANCELLED,
}

_LINE_BREAKS = re.compile(r"[\r\n]")
_STATUS_SEPARATORS = re.compile(r"[\s_\-]+")
_CONTRACT_NUMBER = re.compile(r"\[(.*?)\]")


@dataclass(frozen=True)
class StatusParseResult:
    status: MilestoneStatus
    recognized: bool


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def parse_text(value: Any) -> str | None:
    """
    Trim a text cell and drop embedded line breaks. Blank becomes None.
    """

    if _is_blank(value):
        return None
    cleaned = _LINE_BREAKS.sub("", str(value)).strip()
    return cleaned or None


def parse_percentage(value: Any) -> int:
    """
    Parse a progress cell such as ``" 75% "`` into an integer in [0, 100].

    Anything that is not a finite number yields 0.
    """

    if _is_blank(value):
        return 0

    raw = str(value).strip()
    if raw.endswith("%"):
        raw = raw[:-1].strip()
    if raw.count(",") == 1 and "." not in raw:
        raw = raw.replace(",", ".")

    try:
        number = Decimal(raw)
    except (InvalidOperation, ValueError):
        return 0
    if not number.is_finite():
        return 0

    clamped = min(max(number, Decimal(MIN_PERCENTAGE)), Decimal(MAX_PERCENTAGE))
    return int(clamped.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def parse_deadline(value: Any) -> date | None:
    """
    Parse a deadline cell. Empty or unparseable text yields None.
    """

    if _is_blank(value):
        return None

    raw = str(value).strip()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass

    normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    try:
        return datetime.fromisoformat(normalized).date()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    return None


def parse_status(value: Any) -> StatusParseResult:
    """
    Map free-text status onto the canonical vocabulary, case-insensitively.

    Blank cells default silently; unknown text defaults with recognized=False.
    """

    if _is_blank(value):
        return StatusParseResult(status=DEFAULT_MILESTONE_STATUS, recognized=True)

    key = _STATUS_SEPARATORS.sub("", str(value)).lower()
    status = STATUS_VOCABULARY.get(key)
    if status is None:
        return StatusParseResult(status=DEFAULT_MILESTONE_STATUS, recognized=False)
    return StatusParseResult(status=status, recognized=True)


def extract_contract_number(project_key: str | None) -> str | None:
    """
    Return the contract number written in square brackets, e.g. ``"Port [C-12]"`` -> ``"C-12"``.
    """

    if not project_key:
        return None
    match = _CONTRACT_NUMBER.search(project_key)
    if match is None:
        return None
    contract = match.group(1).strip()
    return contract or None
