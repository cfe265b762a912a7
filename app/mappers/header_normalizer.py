"""
app/mappers/header_normalizer.py

Maps the raw, inconsistently encoded header line of a milestone export to
canonical field names. This is the single mapping table for milestone
imports; the debug scripts and the importer all go through it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping, Sequence

from app.domain.milestone_import import CANONICAL_FIELDS, CanonicalRow

BYTE_ORDER_MARK = "\ufeff"

# Keys are compared upper-cased with internal whitespace runs collapsed to "_".
CANONICAL_HEADER_TABLE: dict[str, str] = {
    "PROJECT": "project",
    "MILESTONE": "milestone",
    "DEADLINE": "deadline",
    "PROGRESS": "progress",
    "STATUS": "status",
}

HEADER_ALIASES: dict[str, str] = {
    "PROJECT_NAME": "project",
    "MILESTONE_NAME": "milestone",
    "TITLE": "milestone",
    "DUE_DATE": "deadline",
    "TARGET_DATE": "deadline",
    "MILESTONE_STATUS": "status",
}

_LINE_BREAKS = re.compile(r"[\r\n]")
_WHITESPACE_RUN = re.compile(r"\s+")


def clean_header(header: str, *, first: bool = False) -> str:
    """
    Strip a leading BOM (first header only), line breaks and surrounding whitespace.
    """

    value = header
    if first and value.startswith(BYTE_ORDER_MARK):
        value = value[len(BYTE_ORDER_MARK):]
    return _LINE_BREAKS.sub("", value).strip()


def header_lookup_key(header: str) -> str:
    return _WHITESPACE_RUN.sub("_", header.strip()).upper()


def canonical_field_for(header: str) -> str | None:
    """
    Return the canonical field for an already cleaned header, or None.
    """

    key = header_lookup_key(header)
    return CANONICAL_HEADER_TABLE.get(key) or HEADER_ALIASES.get(key)


@dataclass(frozen=True)
class HeaderMapping:
    """
    Result of normalizing one header line.

    ``fields`` is positional: the canonical name of each column, or the
    lower-cased cleaned header when the column is unrecognized.
    """

    raw_headers: tuple[str, ...]
    fields: tuple[str, ...]
    canonical_by_raw: dict[str, str]
    unrecognized: tuple[str, ...]

    @property
    def recognized_fields(self) -> tuple[str, ...]:
        return tuple(field for field in CANONICAL_FIELDS if field in self.canonical_by_raw.values())

    @property
    def has_recognized_fields(self) -> bool:
        return bool(self.canonical_by_raw)

    def build_raw_row(self, cells: Sequence[str]) -> dict[str, str | None]:
        """
        Pair a decoded line's cells with the raw headers.

        Missing trailing cells are None; a repeated raw header keeps the
        first column's cell.
        """

        row: dict[str, str | None] = {}
        for index, header in enumerate(self.raw_headers):
            if header in row:
                continue
            row[header] = cells[index] if index < len(cells) else None
        return row

    def map_row(self, raw_row: Mapping[str, str | None]) -> CanonicalRow:
        """
        Project a raw row onto the canonical fields, dropping unknown columns.
        """

        mapped: CanonicalRow = {field: None for field in CANONICAL_FIELDS}
        for raw_header, canonical in self.canonical_by_raw.items():
            mapped[canonical] = raw_row.get(raw_header)
        return mapped


def normalize_headers(raw_headers: Sequence[str]) -> HeaderMapping:
    """
    Build the raw-header -> canonical-field mapping for a header line.

    Pure and deterministic. A canonical field claimed by an earlier column
    is not reassigned; the later column is reported as unrecognized.
    """

    fields: list[str] = []
    canonical_by_raw: dict[str, str] = {}
    unrecognized: list[str] = []
    claimed: set[str] = set()

    for index, raw_header in enumerate(raw_headers):
        cleaned = clean_header(raw_header or "", first=index == 0)
        canonical = canonical_field_for(cleaned)
        if canonical is not None and canonical not in claimed and raw_header not in canonical_by_raw:
            claimed.add(canonical)
            canonical_by_raw[raw_header] = canonical
            fields.append(canonical)
            continue

        fallback = cleaned.lower()
        fields.append(fallback)
        # A trailing delimiter leaves an empty header cell; it is not a column.
        if fallback:
            unrecognized.append(fallback)

    return HeaderMapping(
        raw_headers=tuple(raw_headers),
        fields=tuple(fields),
        canonical_by_raw=canonical_by_raw,
        unrecognized=tuple(unrecognized),
    )
