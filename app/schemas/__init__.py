"""
app/schemas package marker.
"""

from app.schemas.milestone_import import (
    CompletedWithoutProgressResponse,
    MilestoneImportSummaryResponse,
    MilestoneProgressReportResponse,
    MilestoneRowRejectionResponse,
    MilestoneRowWarningResponse,
)

__all__ = [
    "CompletedWithoutProgressResponse",
    "MilestoneImportSummaryResponse",
    "MilestoneProgressReportResponse",
    "MilestoneRowRejectionResponse",
    "MilestoneRowWarningResponse",
]
