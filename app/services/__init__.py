"""
app/services package marker.
"""

from app.services.milestone_import_service import (
    MilestoneImportError,
    MilestoneImportService,
    SourceReadError,
    StoreUnavailableError,
    UnrecognizedHeaderError,
    get_milestone_import_service,
)
from app.services.milestone_progress_report import build_progress_report

__all__ = [
    "MilestoneImportError",
    "MilestoneImportService",
    "SourceReadError",
    "StoreUnavailableError",
    "UnrecognizedHeaderError",
    "build_progress_report",
    "get_milestone_import_service",
]
