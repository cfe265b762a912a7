"""
Repository layer exports.
"""

from db.repositories.errors import MilestoneNotFoundError, ProjectNotFoundError, StoreError
from db.repositories.milestone_job_repository import MilestoneImportJobRepository

__all__ = [
    "MilestoneImportJobRepository",
    "MilestoneNotFoundError",
    "ProjectNotFoundError",
    "StoreError",
]
