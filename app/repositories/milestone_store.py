"""
app/repositories/milestone_store.py

SQLAlchemy implementation of the milestone store used by the CSV importer.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Any, Mapping

from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.milestone_import import TRACKED_FIELDS, MilestoneRecord, ProjectRef, StoredMilestone
from app.parsers.field_parsers import extract_contract_number
from db.models.milestone import Milestone
from db.models.organization import Project
from db.repositories.errors import MilestoneNotFoundError, ProjectNotFoundError, StoreError

logger = logging.getLogger(__name__)


class SqlAlchemyMilestoneStore:
    """
    Milestone store backed by one SQLAlchemy session.

    Project lookups are cached for the lifetime of the store (one import
    run); the importer never writes to ``projects``.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self._project_cache: dict[str, ProjectRef | None] = {}

    def ping(self) -> None:
        try:
            self._session.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise StoreError(f"Milestone store is unreachable: {exc}") from exc

    def find_project_by_key(self, key: str) -> ProjectRef | None:
        """
        Resolve a CSV project name to a project.

        Matches the title case-insensitively first, then the contract number
        written in square brackets in both the key and the project title.
        """

        cache_key = key.strip().lower()
        if cache_key in self._project_cache:
            return self._project_cache[cache_key]

        try:
            project = self._session.scalars(
                select(Project)
                .where(func.lower(Project.title) == cache_key)
                .order_by(Project.id)
                .limit(1)
            ).first()

            if project is None:
                contract = extract_contract_number(key)
                if contract is not None:
                    project = self._session.scalars(
                        select(Project)
                        .where(Project.title.contains(f"[{contract}]", autoescape=True))
                        .order_by(Project.id)
                        .limit(1)
                    ).first()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise StoreError(f"Project lookup failed for '{key}': {exc}") from exc

        ref = _to_project_ref(project) if project is not None else None
        self._project_cache[cache_key] = ref
        if ref is None:
            logger.debug("No project matches key=%r", key)
        return ref

    def find_milestone(self, project_key: str, title: str) -> StoredMilestone | None:
        project = self.find_project_by_key(project_key)
        if project is None:
            return None

        try:
            milestone = self._session.scalars(
                select(Milestone).where(
                    Milestone.project_id == project.id,
                    Milestone.title == title,
                )
            ).first()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise StoreError(f"Milestone lookup failed for '{project_key}' / '{title}': {exc}") from exc

        if milestone is None:
            return None
        return StoredMilestone(
            id=milestone.id,
            project_id=milestone.project_id,
            title=milestone.title,
            deadline=milestone.deadline,
            completion_percentage=milestone.completion_percentage,
            status=milestone.status,
        )

    def insert_milestone(
        self,
        record: MilestoneRecord,
        *,
        created_by_user_id: int | None = None,
    ) -> int:
        project = self.find_project_by_key(record.project_key)
        if project is None:
            raise ProjectNotFoundError(f"Project '{record.project_key}' does not exist.")

        milestone = Milestone(
            project_id=project.id,
            title=record.title,
            description=record.description,
            deadline=record.deadline,
            status=record.status.value,
            completion_percentage=record.completion_percentage,
            created_by_user_id=created_by_user_id,
        )
        try:
            self._session.add(milestone)
            self._session.flush()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to insert milestone '{record.title}': {exc}") from exc
        return milestone.id

    def update_milestone(self, milestone_id: int, changed_fields: Mapping[str, Any]) -> None:
        unknown = set(changed_fields) - set(TRACKED_FIELDS)
        if unknown:
            raise ValueError(f"Unsupported milestone fields: {sorted(unknown)}")

        try:
            milestone = self._session.get(Milestone, milestone_id)
            if milestone is None:
                raise MilestoneNotFoundError(f"Milestone id={milestone_id} no longer exists.")
            for name, value in changed_fields.items():
                setattr(milestone, name, value.value if isinstance(value, Enum) else value)
            self._session.flush()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to update milestone id={milestone_id}: {exc}") from exc

    @contextmanager
    def row_scope(self) -> Iterator[None]:
        try:
            yield
        except BaseException:
            self._session.rollback()
            raise

        try:
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise StoreError(f"Failed to commit row: {exc}") from exc


def _to_project_ref(project: Project) -> ProjectRef:
    return ProjectRef(
        id=project.id,
        title=project.title,
        manager_user_id=project.manager_user_id,
        department_id=project.department_id,
    )
