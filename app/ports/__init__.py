"""
app/ports package marker.
"""

from app.ports.milestone_store import AuditSink, MilestoneStore

__all__ = [
    "AuditSink",
    "MilestoneStore",
]
