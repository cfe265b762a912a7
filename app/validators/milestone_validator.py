"""
app/validators/milestone_validator.py

Row-level validation for milestone imports: strict on identity, lenient on values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping

from app.domain.milestone_import import (
    MilestoneRecord,
    ProjectRef,
    RejectionReason,
    RowRejection,
    RowWarning,
)
from app.parsers.field_parsers import parse_deadline, parse_percentage, parse_status, parse_text
from app.ports.milestone_store import MilestoneStore
from db.repositories.errors import StoreError

logger = logging.getLogger(__name__)

DESCRIPTION_TEMPLATE = "Imported from CSV. Original deadline: {deadline}"
UNSPECIFIED_DEADLINE = "Not specified"


@dataclass(frozen=True)
class RowValidationResult:
    """
    Outcome of validating one canonical row.

    Exactly one of ``record`` and ``rejection`` is set. ``project`` is the
    resolved project when the row was accepted.
    """

    record: MilestoneRecord | None = None
    project: ProjectRef | None = None
    rejection: RowRejection | None = None
    warnings: list[RowWarning] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return self.record is not None


class MilestoneRowValidator:
    """
    Turns a canonical row into a MilestoneRecord or a rejection.

    Only the identity fields (project, milestone title) can reject a row.
    Progress, deadline and status are repaired with defaults.
    """

    def validate(
        self,
        *,
        canonical_row: Mapping[str, str | None],
        row_number: int,
        store: MilestoneStore,
    ) -> RowValidationResult:
        project_key = parse_text(canonical_row.get("project"))
        if project_key is None:
            return self._reject(
                row_number,
                RejectionReason.MISSING_PROJECT,
                "Project is required.",
                canonical_row.get("project"),
            )

        title = parse_text(canonical_row.get("milestone"))
        if title is None:
            return self._reject(
                row_number,
                RejectionReason.MISSING_MILESTONE,
                "Milestone title is required.",
                canonical_row.get("milestone"),
            )

        try:
            project = store.find_project_by_key(project_key)
        except StoreError as exc:
            logger.warning("Project lookup failed row=%s project=%r: %s", row_number, project_key, exc)
            return self._reject(
                row_number,
                RejectionReason.STORE_ERROR,
                f"Project lookup failed: {exc}",
                project_key,
            )
        if project is None:
            return self._reject(
                row_number,
                RejectionReason.UNKNOWN_PROJECT,
                f"Project '{project_key}' does not exist.",
                project_key,
            )

        warnings: list[RowWarning] = []
        raw_status = canonical_row.get("status")
        status_result = parse_status(raw_status)
        if not status_result.recognized:
            warnings.append(
                RowWarning(
                    row_number=row_number,
                    field="status",
                    message=f"Unknown status; defaulted to {status_result.status.value}.",
                    value=raw_status,
                )
            )

        raw_deadline = parse_text(canonical_row.get("deadline"))
        deadline = parse_deadline(raw_deadline)
        if raw_deadline is not None and deadline is None:
            warnings.append(
                RowWarning(
                    row_number=row_number,
                    field="deadline",
                    message="Unparseable deadline; stored as open.",
                    value=raw_deadline,
                )
            )

        record = MilestoneRecord(
            project_key=project_key,
            title=title,
            deadline=deadline,
            completion_percentage=parse_percentage(canonical_row.get("progress")),
            status=status_result.status,
            description=DESCRIPTION_TEMPLATE.format(deadline=raw_deadline or UNSPECIFIED_DEADLINE),
        )
        return RowValidationResult(record=record, project=project, warnings=warnings)

    @staticmethod
    def _reject(
        row_number: int,
        reason: str,
        message: str,
        value: str | None,
    ) -> RowValidationResult:
        return RowValidationResult(
            rejection=RowRejection(
                row_number=row_number,
                reason=reason,
                message=message,
                value=value,
            )
        )
