"""
app/domain package marker.
"""

from app.domain.milestone_import import (
    ActorContext,
    AuditEntry,
    ImportSummary,
    MilestoneRecord,
    MilestoneStatus,
    ProjectRef,
    RowRejection,
    RowWarning,
    StoredMilestone,
)

__all__ = [
    "ActorContext",
    "AuditEntry",
    "ImportSummary",
    "MilestoneRecord",
    "MilestoneStatus",
    "ProjectRef",
    "RowRejection",
    "RowWarning",
    "StoredMilestone",
]
