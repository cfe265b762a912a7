"""
app/services/milestone_progress_report.py

Post-import verification: how completion percentages and statuses are
distributed across stored milestones.
"""

from __future__ import annotations

import logging

from sqlalchemy import case, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.milestone_import import MilestoneStatus
from app.schemas.milestone_import import CompletedWithoutProgressResponse, MilestoneProgressReportResponse
from db.models.milestone import Milestone
from db.models.organization import Project
from db.repositories.errors import StoreError

logger = logging.getLogger(__name__)

# (label, lower bound, upper bound), both inclusive.
PERCENTAGE_BUCKETS: tuple[tuple[str, int, int], ...] = (
    ("0%", 0, 0),
    ("1-25%", 1, 25),
    ("26-50%", 26, 50),
    ("51-75%", 51, 75),
    ("76-99%", 76, 99),
    ("100%", 100, 100),
)


def build_progress_report(session: Session, *, anomaly_limit: int = 50) -> MilestoneProgressReportResponse:
    """
    Summarize completion percentages, status counts and suspicious rows.

    Milestones marked Completed with 0% progress usually mean the export
    carried a status but no progress column; up to ``anomaly_limit`` of
    them are listed.
    """

    bucket_label = case(
        *[
            (Milestone.completion_percentage.between(low, high), label)
            for label, low, high in PERCENTAGE_BUCKETS
        ],
        else_="out-of-range",
    )

    try:
        bucket_rows = session.execute(
            select(bucket_label.label("bucket"), func.count(Milestone.id)).group_by("bucket")
        ).all()
        status_rows = session.execute(
            select(Milestone.status, func.count(Milestone.id))
            .group_by(Milestone.status)
            .order_by(Milestone.status)
        ).all()
        anomalies = session.execute(
            select(Milestone.id, Project.title, Milestone.title)
            .join(Project, Project.id == Milestone.project_id)
            .where(
                Milestone.status == MilestoneStatus.COMPLETED.value,
                Milestone.completion_percentage == 0,
            )
            .order_by(Milestone.id)
            .limit(max(1, anomaly_limit))
        ).all()
    except SQLAlchemyError as exc:
        raise StoreError(f"Failed to build milestone progress report: {exc}") from exc

    buckets = {label: 0 for label, _, _ in PERCENTAGE_BUCKETS}
    for label, count in bucket_rows:
        buckets[label] = int(count)

    report = MilestoneProgressReportResponse(
        total_milestones=sum(buckets.values()),
        percentage_buckets=buckets,
        status_counts={status: int(count) for status, count in status_rows},
        completed_without_progress=[
            CompletedWithoutProgressResponse(
                milestone_id=milestone_id,
                project_title=project_title,
                title=title,
            )
            for milestone_id, project_title, title in anomalies
        ],
    )
    if report.completed_without_progress:
        logger.warning(
            "Found %s completed milestones with 0%% progress",
            len(report.completed_without_progress),
        )
    return report
