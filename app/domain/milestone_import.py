"""
app/domain/milestone_import.py

Domain types shared by the milestone CSV import pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

CANONICAL_FIELDS: tuple[str, ...] = (
    "project",
    "milestone",
    "deadline",
    "progress",
    "status",
)

# Fields compared against the stored milestone to decide update vs. unchanged.
TRACKED_FIELDS: tuple[str, ...] = (
    "deadline",
    "completion_percentage",
    "status",
)

RawRow = dict[str, str | None]
CanonicalRow = dict[str, str | None]


class MilestoneStatus(str, Enum):
    PLANNING = "Planning"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    DELAYED = "Delayed"
    CANCELLED = "Cancelled"


DEFAULT_MILESTONE_STATUS = MilestoneStatus.PLANNING


class RejectionReason:
    MISSING_PROJECT = "missing-project"
    MISSING_MILESTONE = "missing-milestone"
    UNKNOWN_PROJECT = "unknown-project"
    STORE_ERROR = "store-error"


class AuditAction:
    MILESTONE_IMPORT_CREATE = "milestone.import.create"
    MILESTONE_IMPORT_UPDATE = "milestone.import.update"


@dataclass(frozen=True)
class ActorContext:
    """
    Authenticated caller attributed on every audit entry of a run.
    """

    actor_id: int | None = None
    department_id: int | None = None
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class ProjectRef:
    id: int
    title: str
    manager_user_id: int | None = None
    department_id: int | None = None


@dataclass(frozen=True)
class MilestoneRecord:
    """
    Validated milestone row ready for persistence.
    """

    project_key: str
    title: str
    deadline: date | None
    completion_percentage: int
    status: MilestoneStatus
    description: str | None = None

    @property
    def business_key(self) -> tuple[str, str]:
        return (self.project_key, self.title)


@dataclass(frozen=True)
class StoredMilestone:
    """
    Current persisted state of a milestone, as seen by change detection.

    ``status`` is the stored text; legacy values outside MilestoneStatus are
    kept verbatim so they still compare as changed.
    """

    id: int
    project_id: int
    title: str
    deadline: date | None
    completion_percentage: int
    status: str


@dataclass(frozen=True)
class AuditEntry:
    action: str
    entity_type: str
    entity_id: int | None
    details: dict[str, Any]
    actor_id: int | None = None
    department_id: int | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class RowRejection:
    row_number: int
    reason: str
    message: str
    value: str | None = None


@dataclass(frozen=True)
class RowWarning:
    """
    Non-fatal repair applied to a row (for example an unknown status).
    """

    row_number: int
    field: str
    message: str
    value: str | None = None


@dataclass
class ImportSummary:
    """
    Run accumulator owned by a single pipeline invocation.

    Counters are always exact. The rejection and warning lists are capped at
    ``max_recorded_issues`` entries each to keep huge runs bounded.
    """

    rows_read: int = 0
    rows_inserted: int = 0
    rows_updated: int = 0
    rows_unchanged: int = 0
    rows_rejected: int = 0
    audit_failures: int = 0
    rejections: list[RowRejection] = field(default_factory=list)
    warnings: list[RowWarning] = field(default_factory=list)
    unrecognized_headers: list[str] = field(default_factory=list)
    delimiter: str | None = None
    max_recorded_issues: int = 500

    def record_rejection(self, rejection: RowRejection) -> None:
        self.rows_rejected += 1
        if len(self.rejections) < self.max_recorded_issues:
            self.rejections.append(rejection)

    def record_warning(self, warning: RowWarning) -> None:
        if len(self.warnings) < self.max_recorded_issues:
            self.warnings.append(warning)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rows_read": self.rows_read,
            "rows_inserted": self.rows_inserted,
            "rows_updated": self.rows_updated,
            "rows_unchanged": self.rows_unchanged,
            "rows_rejected": self.rows_rejected,
            "audit_failures": self.audit_failures,
            "delimiter": self.delimiter,
            "unrecognized_headers": list(self.unrecognized_headers),
            "rejections": [
                {
                    "row_number": rejection.row_number,
                    "reason": rejection.reason,
                    "message": rejection.message,
                    "value": rejection.value,
                }
                for rejection in self.rejections
            ],
            "warnings": [
                {
                    "row_number": warning.row_number,
                    "field": warning.field,
                    "message": warning.message,
                    "value": warning.value,
                }
                for warning in self.warnings
            ],
        }
