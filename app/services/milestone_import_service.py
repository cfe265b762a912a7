"""
app/services/milestone_import_service.py

Service layer for the milestone CSV import pipeline.

One run streams a delimited export line by line, maps the header once,
validates each row and upserts it by (project, milestone title):

    absent            -> insert, audit ``milestone.import.create``
    tracked change    -> update changed fields, audit ``milestone.import.update``
    no change         -> no write, no audit

Each write and its audit entry share one ``store.row_scope()`` unit. Row
problems never stop the run; only an unreadable source, an unrecognized
header line or an unreachable store do, and those errors carry the
partial summary.
"""

from __future__ import annotations

import csv
import io
import itertools
import logging
import os
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from typing import IO, Any, Union

from app.audit.emitter import AuditEmitter
from app.config import AUTO_DELIMITER, DEFAULT_DELIMITER, SUPPORTED_DELIMITERS, get_milestone_import_settings
from app.domain.milestone_import import (
    ActorContext,
    AuditAction,
    ImportSummary,
    MilestoneRecord,
    ProjectRef,
    RejectionReason,
    RowRejection,
    StoredMilestone,
)
from app.logging_utils import log_event
from app.mappers.header_normalizer import HeaderMapping, normalize_headers
from app.ports.milestone_store import AuditSink, MilestoneStore
from app.validators.milestone_validator import MilestoneRowValidator
from db.repositories.errors import StoreError

logger = logging.getLogger(__name__)

MilestoneSource = Union[str, os.PathLike, IO[str], IO[bytes], Iterable[str]]


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class MilestoneImportError(RuntimeError):
    """
    Fatal pipeline error. ``summary`` holds the counters reached before the abort.
    """

    def __init__(self, message: str, *, summary: ImportSummary) -> None:
        super().__init__(message)
        self.summary = summary


class SourceReadError(MilestoneImportError):
    """
    Raised when the source cannot be opened, decoded or tokenized.
    """


class UnrecognizedHeaderError(MilestoneImportError):
    """
    Raised when the header line is missing or maps no canonical field.
    """


class StoreUnavailableError(MilestoneImportError):
    """
    Raised when the store does not answer the start-of-run ping.
    """


# ---------------------------------------------------------------------------
# Source reading
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParsedSource:
    """
    Header mapping plus a lazy iterator of ``(row_number, cells)`` data rows.

    Row numbers are physical source line numbers; the header is line 1
    unless blank lines precede it. Blank data lines are skipped.
    """

    mapping: HeaderMapping
    delimiter: str
    rows: Iterator[tuple[int, list[str]]]


@contextmanager
def open_source_lines(source: MilestoneSource, *, encoding: str = "utf-8-sig") -> Iterator[Iterable[str]]:
    """
    Yield the source as an iterable of text lines without buffering it.

    Paths are opened and closed here. Binary streams are decoded with
    ``encoding`` and detached afterwards so the caller's stream stays open.
    Text streams and plain iterables are used as they are.
    """

    if isinstance(source, (str, os.PathLike)):
        with open(source, encoding=encoding, newline="") as handle:
            yield handle
        return

    if isinstance(source, (io.RawIOBase, io.BufferedIOBase)):
        wrapper = io.TextIOWrapper(source, encoding=encoding, newline="")
        try:
            yield wrapper
        finally:
            wrapper.detach()
        return

    yield source


def detect_delimiter(header_line: str, configured: str = DEFAULT_DELIMITER) -> str:
    """
    Resolve ``auto`` to the first supported delimiter present in the header line.
    """

    if configured != AUTO_DELIMITER:
        return configured
    for candidate in SUPPORTED_DELIMITERS:
        if candidate in header_line:
            return candidate
    return DEFAULT_DELIMITER


def read_source(lines: Iterable[str], *, delimiter: str = DEFAULT_DELIMITER) -> ParsedSource | None:
    """
    Read the header line and return a streaming view of the data rows.

    Returns None when the source holds no non-blank line.
    """

    line_iter = iter(lines)
    skipped = 0
    header_line: str | None = None
    for line in line_iter:
        if line.strip():
            header_line = line
            break
        skipped += 1
    if header_line is None:
        return None

    resolved = detect_delimiter(header_line, delimiter)
    reader = csv.reader(itertools.chain([header_line], line_iter), delimiter=resolved)
    headers = next(reader, [])
    mapping = normalize_headers(headers)

    def _rows() -> Iterator[tuple[int, list[str]]]:
        for cells in reader:
            if not any(cell.strip() for cell in cells):
                continue
            yield reader.line_num + skipped, cells

    return ParsedSource(mapping=mapping, delimiter=resolved, rows=_rows())


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class MilestoneImportService:
    """
    Coordinates header mapping, validation, upserts and audit for one import.
    """

    def __init__(
        self,
        *,
        delimiter: str = DEFAULT_DELIMITER,
        encoding: str = "utf-8-sig",
        max_recorded_issues: int = 500,
        log_rejections: bool = True,
        validator: MilestoneRowValidator | None = None,
    ) -> None:
        self._delimiter = delimiter
        self._encoding = encoding
        self._max_recorded_issues = max(1, max_recorded_issues)
        self._log_rejections = log_rejections
        self._validator = validator or MilestoneRowValidator()

    def run(
        self,
        source: MilestoneSource,
        *,
        store: MilestoneStore,
        actor: ActorContext,
        audit_sink: AuditSink,
    ) -> ImportSummary:
        """
        Import every row of ``source`` and return the run summary.

        Args:
            source:      Path, text stream, binary stream or iterable of lines.
            store:       Milestone store; the caller owns its session.
            actor:       Caller identity attached to every audit entry.
            audit_sink:  Destination for audit entries.
        """

        summary = ImportSummary(max_recorded_issues=self._max_recorded_issues)

        try:
            store.ping()
        except StoreError as exc:
            raise StoreUnavailableError(f"Milestone store is unavailable: {exc}", summary=summary) from exc

        emitter = AuditEmitter(sink=audit_sink, actor=actor)
        try:
            with open_source_lines(source, encoding=self._encoding) as lines:
                self._import_lines(lines, summary=summary, store=store, actor=actor, emitter=emitter)
        except (UnicodeDecodeError, csv.Error, OSError) as exc:
            raise SourceReadError(f"Failed to read milestone source: {exc}", summary=summary) from exc
        finally:
            summary.audit_failures = emitter.failures

        log_event(
            logger,
            logging.INFO,
            "milestone_import_completed",
            rows_read=summary.rows_read,
            rows_inserted=summary.rows_inserted,
            rows_updated=summary.rows_updated,
            rows_unchanged=summary.rows_unchanged,
            rows_rejected=summary.rows_rejected,
            audit_failures=summary.audit_failures,
            delimiter=summary.delimiter,
        )
        return summary

    def _import_lines(
        self,
        lines: Iterable[str],
        *,
        summary: ImportSummary,
        store: MilestoneStore,
        actor: ActorContext,
        emitter: AuditEmitter,
    ) -> None:
        parsed = read_source(lines, delimiter=self._delimiter)
        if parsed is None:
            raise UnrecognizedHeaderError("Milestone source has no header line.", summary=summary)

        summary.delimiter = parsed.delimiter
        summary.unrecognized_headers = list(parsed.mapping.unrecognized)
        if not parsed.mapping.has_recognized_fields:
            raise UnrecognizedHeaderError(
                "Header line maps none of the milestone fields: "
                f"{list(parsed.mapping.raw_headers)}",
                summary=summary,
            )
        if parsed.mapping.unrecognized:
            logger.warning("Ignoring unrecognized milestone columns: %s", list(parsed.mapping.unrecognized))

        for row_number, cells in parsed.rows:
            summary.rows_read += 1
            canonical_row = parsed.mapping.map_row(parsed.mapping.build_raw_row(cells))
            result = self._validator.validate(
                canonical_row=canonical_row,
                row_number=row_number,
                store=store,
            )
            for warning in result.warnings:
                summary.record_warning(warning)
                logger.info(
                    "Row %s repaired field=%s value=%r: %s",
                    warning.row_number,
                    warning.field,
                    warning.value,
                    warning.message,
                )

            if result.rejection is not None:
                self._record_rejection(summary, result.rejection)
                continue

            try:
                self._upsert(
                    result.record,
                    project=result.project,
                    row_number=row_number,
                    summary=summary,
                    store=store,
                    actor=actor,
                    emitter=emitter,
                )
            except StoreError as exc:
                self._record_rejection(
                    summary,
                    RowRejection(
                        row_number=row_number,
                        reason=RejectionReason.STORE_ERROR,
                        message=str(exc),
                        value=result.record.title,
                    ),
                )

    def _upsert(
        self,
        record: MilestoneRecord,
        *,
        project: ProjectRef,
        row_number: int,
        summary: ImportSummary,
        store: MilestoneStore,
        actor: ActorContext,
        emitter: AuditEmitter,
    ) -> None:
        existing = store.find_milestone(record.project_key, record.title)

        if existing is None:
            created_by = actor.actor_id if actor.actor_id is not None else project.manager_user_id
            with store.row_scope():
                milestone_id = store.insert_milestone(record, created_by_user_id=created_by)
                emitter.emit(
                    action=AuditAction.MILESTONE_IMPORT_CREATE,
                    entity_id=milestone_id,
                    details={
                        "projectKey": record.project_key,
                        "title": record.title,
                        "deadline": _json_value(record.deadline),
                        "completionPercentage": record.completion_percentage,
                        "status": record.status.value,
                        "rowNumber": row_number,
                    },
                )
            summary.rows_inserted += 1
            return

        changes = _tracked_changes(existing, record)
        if not changes:
            summary.rows_unchanged += 1
            return

        with store.row_scope():
            store.update_milestone(
                existing.id,
                {name: getattr(record, name) for name in changes},
            )
            emitter.emit(
                action=AuditAction.MILESTONE_IMPORT_UPDATE,
                entity_id=existing.id,
                details={
                    "projectKey": record.project_key,
                    "title": record.title,
                    "rowNumber": row_number,
                    "changes": changes,
                },
            )
        summary.rows_updated += 1

    def _record_rejection(self, summary: ImportSummary, rejection: RowRejection) -> None:
        summary.record_rejection(rejection)
        if self._log_rejections:
            logger.warning(
                "Rejected milestone row=%s reason=%s value=%r: %s",
                rejection.row_number,
                rejection.reason,
                rejection.value,
                rejection.message,
            )


def _json_value(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    if hasattr(value, "value"):
        return value.value
    return value


def _tracked_changes(existing: StoredMilestone, record: MilestoneRecord) -> dict[str, dict[str, Any]]:
    """
    Return ``{field: {"from": old, "to": new}}`` for each tracked field that differs.
    """

    pairs = {
        "deadline": (existing.deadline, record.deadline),
        "completion_percentage": (existing.completion_percentage, record.completion_percentage),
        "status": (existing.status, record.status.value),
    }
    return {
        name: {"from": _json_value(old), "to": _json_value(new)}
        for name, (old, new) in pairs.items()
        if old != new
    }


@lru_cache(maxsize=1)
def get_milestone_import_service() -> MilestoneImportService:
    """
    Return a cached service instance configured from environment variables.
    """

    settings = get_milestone_import_settings()
    return MilestoneImportService(
        delimiter=settings.delimiter,
        encoding=settings.encoding,
        max_recorded_issues=settings.max_recorded_issues,
        log_rejections=settings.log_rejections,
    )
