"""
app/ports/milestone_store.py

Persistence boundary consumed by the milestone import pipeline.

Implementations raise ``db.repositories.errors.StoreError`` (or a
subclass) for any transport or database failure.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Any, Mapping, Protocol, runtime_checkable

if TYPE_CHECKING:
    from app.domain.milestone_import import AuditEntry, MilestoneRecord, ProjectRef, StoredMilestone


@runtime_checkable
class MilestoneStore(Protocol):
    """Lookup and upsert contract for milestones keyed by (project key, title)."""

    def ping(self) -> None:
        """Raise StoreError when the store is unreachable."""
        ...

    def find_project_by_key(self, key: str) -> ProjectRef | None: ...

    def find_milestone(self, project_key: str, title: str) -> StoredMilestone | None: ...

    def insert_milestone(
        self,
        record: MilestoneRecord,
        *,
        created_by_user_id: int | None = None,
    ) -> int: ...

    def update_milestone(self, milestone_id: int, changed_fields: Mapping[str, Any]) -> None: ...

    def row_scope(self) -> AbstractContextManager[None]:
        """
        Unit of work for one row: committed on clean exit, rolled back on any exception.
        """
        ...


@runtime_checkable
class AuditSink(Protocol):
    """Append-only destination for audit entries."""

    def append(self, entry: AuditEntry) -> None: ...
