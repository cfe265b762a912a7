"""
tests/test_milestone_job_repository.py

Milestone import job rows written through MilestoneImportJobRepository.
"""

from __future__ import annotations

from app.domain.milestone_import import ImportSummary, RejectionReason, RowRejection
from db.models import IngestionJob, IngestionJobStatus, IngestionJobType
from db.repositories.milestone_job_repository import MilestoneImportJobRepository


def _summary() -> ImportSummary:
    summary = ImportSummary(rows_read=3, rows_inserted=2, delimiter=";")
    summary.record_rejection(
        RowRejection(row_number=4, reason=RejectionReason.UNKNOWN_PROJECT, message="No project", value="Gamma")
    )
    return summary


class TestMilestoneImportJobs:
    def test_start_records_running_job(self, sqlite_session) -> None:
        job = MilestoneImportJobRepository(sqlite_session).start(source="/tmp/m.csv", delimiter="auto", actor_id=20)

        assert job.id is not None
        assert (job.job_type, job.status) == (IngestionJobType.MILESTONE_CSV, IngestionJobStatus.RUNNING)
        assert job.started_at is not None and job.completed_at is None
        assert job.request_payload == {"path": "/tmp/m.csv", "delimiter": "auto", "actor_id": 20}

    def test_completed_job_stores_summary(self, sqlite_session) -> None:
        repository = MilestoneImportJobRepository(sqlite_session)
        job = repository.start(source="/tmp/m.csv")
        sqlite_session.commit()

        repository.mark_completed(job.id, _summary())
        sqlite_session.commit()

        stored = sqlite_session.get(IngestionJob, job.id)
        assert stored.status == IngestionJobStatus.COMPLETED
        assert stored.error_message is None
        assert stored.result_payload["rows_inserted"] == 2
        assert stored.result_payload["rejections"][0]["value"] == "Gamma"

    def test_failed_job_keeps_error_and_partial_summary(self, sqlite_session) -> None:
        repository = MilestoneImportJobRepository(sqlite_session)
        job = repository.start(source="/tmp/m.csv")

        repository.mark_failed(job.id, "Header line maps none of the milestone fields", _summary())

        assert job.status == IngestionJobStatus.FAILED
        assert job.completed_at is not None
        assert job.error_message.startswith("Header line")
        assert job.result_payload["rows_read"] == 3

    def test_unknown_job_is_ignored(self, sqlite_session) -> None:
        assert MilestoneImportJobRepository(sqlite_session).mark_completed(999, _summary()) is None
