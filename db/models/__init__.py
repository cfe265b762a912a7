"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.audit_log import AuditLog
from db.models.ingestion_job import IngestionJob, IngestionJobStatus, IngestionJobType
from db.models.milestone import Milestone
from db.models.organization import Department, Project, User

__all__ = [
    "AuditLog",
    "Department",
    "IngestionJob",
    "IngestionJobStatus",
    "IngestionJobType",
    "Milestone",
    "Project",
    "User",
]
