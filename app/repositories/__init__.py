"""
app/repositories package marker.
"""

from app.repositories.audit_log_repository import SqlAlchemyAuditSink
from app.repositories.milestone_store import SqlAlchemyMilestoneStore

__all__ = [
    "SqlAlchemyAuditSink",
    "SqlAlchemyMilestoneStore",
]
