"""
app/schemas/milestone_import.py

Report schemas for milestone import runs and progress verification.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.domain.milestone_import import ImportSummary


class MilestoneRowRejectionResponse(BaseModel):
    """
    One rejected row.
    """

    row_number: int = Field(..., ge=1)
    reason: str
    message: str
    value: str | None = None


class MilestoneRowWarningResponse(BaseModel):
    """
    One repaired value on an accepted row.
    """

    row_number: int = Field(..., ge=1)
    field: str
    message: str
    value: str | None = None


class MilestoneImportSummaryResponse(BaseModel):
    """
    Serialized summary of one milestone import run.
    """

    rows_read: int = Field(..., ge=0)
    rows_inserted: int = Field(..., ge=0)
    rows_updated: int = Field(..., ge=0)
    rows_unchanged: int = Field(..., ge=0)
    rows_rejected: int = Field(..., ge=0)
    audit_failures: int = Field(0, ge=0)
    delimiter: str | None = None
    unrecognized_headers: list[str] = Field(default_factory=list)
    rejections: list[MilestoneRowRejectionResponse] = Field(default_factory=list)
    warnings: list[MilestoneRowWarningResponse] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary: ImportSummary) -> "MilestoneImportSummaryResponse":
        return cls.model_validate(summary.to_dict())


class CompletedWithoutProgressResponse(BaseModel):
    milestone_id: int
    project_title: str
    title: str


class MilestoneProgressReportResponse(BaseModel):
    """
    Completion distribution across all stored milestones.
    """

    total_milestones: int = Field(..., ge=0)
    percentage_buckets: dict[str, int] = Field(default_factory=dict)
    status_counts: dict[str, int] = Field(default_factory=dict)
    completed_without_progress: list[CompletedWithoutProgressResponse] = Field(default_factory=list)
