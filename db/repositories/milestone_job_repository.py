"""
db/repositories/milestone_job_repository.py

Tracks milestone CSV runs in ``ingestion_jobs``. A run row is written as
running when the import starts and closed with its ImportSummary payload.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.domain.milestone_import import ImportSummary
from db.models.ingestion_job import IngestionJob, IngestionJobStatus, IngestionJobType

logger = logging.getLogger(__name__)


class MilestoneImportJobRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def start(
        self,
        *,
        source: str,
        delimiter: str | None = None,
        actor_id: int | None = None,
    ) -> IngestionJob:
        """
        Insert a running job row for one import of ``source``.
        """

        job = IngestionJob(
            job_type=IngestionJobType.MILESTONE_CSV,
            status=IngestionJobStatus.RUNNING,
            request_payload={"path": source, "delimiter": delimiter, "actor_id": actor_id},
            started_at=datetime.now(timezone.utc),
        )
        self._session.add(job)
        self._session.flush()
        return job

    def mark_completed(self, job_id: int, summary: ImportSummary) -> IngestionJob | None:
        return self._close(job_id, IngestionJobStatus.COMPLETED, summary)

    def mark_failed(self, job_id: int, error: str, summary: ImportSummary) -> IngestionJob | None:
        return self._close(job_id, IngestionJobStatus.FAILED, summary, error=error)

    def _close(
        self,
        job_id: int,
        status: str,
        summary: ImportSummary,
        *,
        error: str | None = None,
    ) -> IngestionJob | None:
        job = self._session.get(IngestionJob, job_id)
        if job is None or job.job_type != IngestionJobType.MILESTONE_CSV:
            logger.warning("Milestone import job id=%s not found; summary not recorded", job_id)
            return None
        job.status = status
        job.completed_at = datetime.now(timezone.utc)
        job.result_payload = summary.to_dict()
        job.error_message = error
        return job
