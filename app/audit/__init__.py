"""
app/audit package marker.
"""

from app.audit.emitter import MILESTONE_ENTITY_TYPE, AuditEmitter

__all__ = [
    "AuditEmitter",
    "MILESTONE_ENTITY_TYPE",
]
