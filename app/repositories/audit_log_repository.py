"""
app/repositories/audit_log_repository.py

Append-only audit sink writing to ``audit_logs``.
"""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.milestone_import import AuditEntry
from db.models.audit_log import AuditLog
from db.repositories.errors import StoreError


class SqlAlchemyAuditSink:
    """
    Writes each audit entry inside a SAVEPOINT of the caller's transaction.

    A failed insert only rolls back the savepoint, so the milestone write
    sharing the transaction is still committed by the row scope.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def append(self, entry: AuditEntry) -> None:
        try:
            with self._session.begin_nested():
                self._session.add(
                    AuditLog(
                        action=entry.action,
                        entity_type=entry.entity_type,
                        entity_id=entry.entity_id,
                        details=entry.details,
                        user_id=entry.actor_id,
                        department_id=entry.department_id,
                        ip_address=entry.ip_address,
                        user_agent=entry.user_agent,
                        created_at=entry.created_at,
                    )
                )
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to append audit entry action={entry.action}: {exc}") from exc
