"""
db/models/milestone.py

Milestone model. ``(project_id, title)`` is the business key the CSV
importer matches on.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.organization import Project


class Milestone(Base, TimestampMixin):
    __tablename__ = "milestones"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    deadline: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="Planning",
        comment="Planning, InProgress, Completed, Delayed, Cancelled",
    )
    completion_percentage: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_by_user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    project: Mapped["Project"] = relationship("Project", back_populates="milestones")

    __table_args__ = (
        UniqueConstraint("project_id", "title", name="uq_milestones_project_id_title"),
        CheckConstraint(
            "completion_percentage >= 0 AND completion_percentage <= 100",
            name="ck_milestones_completion_percentage_range",
        ),
        Index("ix_milestones_project_id", "project_id"),
        Index("ix_milestones_status", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Milestone id={self.id} project_id={self.project_id} "
            f"title={self.title!r} status={self.status!r}>"
        )
