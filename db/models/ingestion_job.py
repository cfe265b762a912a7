"""
db/models/ingestion_job.py

Import job record, one row per tracked milestone CSV run.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, JSONColumn, TimestampMixin


class IngestionJobType:
    MILESTONE_CSV = "milestone_csv"


class IngestionJobStatus:
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class IngestionJob(Base, TimestampMixin):
    __tablename__ = "ingestion_jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    job_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="milestone_csv",
    )
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=IngestionJobStatus.PENDING,
    )
    request_payload: Mapped[dict[str, Any] | None] = mapped_column(
        JSONColumn,
        nullable=True,
        comment="Source path, delimiter and actor of the run",
    )
    result_payload: Mapped[dict[str, Any] | None] = mapped_column(
        JSONColumn,
        nullable=True,
        comment="Import summary",
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_ingestion_jobs_job_type", "job_type"),
        Index("ix_ingestion_jobs_status", "status"),
        Index("ix_ingestion_jobs_created_at", "created_at"),
        Index("ix_ingestion_jobs_job_type_status", "job_type", "status"),
    )
