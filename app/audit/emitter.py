"""
app/audit/emitter.py

Best-effort audit emission for the milestone import pipeline.
"""

from __future__ import annotations

import logging
from typing import Any

from app.domain.milestone_import import ActorContext, AuditEntry
from app.ports.milestone_store import AuditSink

logger = logging.getLogger(__name__)

MILESTONE_ENTITY_TYPE = "milestone"


class AuditEmitter:
    """
    Builds one AuditEntry per mutating action and hands it to the sink.

    The actor context is fixed for the emitter's lifetime and is never
    inferred from row data. A failing sink is logged and counted, never
    raised, so an audit outage cannot undo or stop the milestone writes.
    """

    def __init__(self, *, sink: AuditSink, actor: ActorContext) -> None:
        self._sink = sink
        self._actor = actor
        self.failures = 0

    def emit(
        self,
        *,
        action: str,
        entity_id: int | None,
        details: dict[str, Any],
        entity_type: str = MILESTONE_ENTITY_TYPE,
    ) -> bool:
        entry = AuditEntry(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            actor_id=self._actor.actor_id,
            department_id=self._actor.department_id,
            ip_address=self._actor.ip_address,
            user_agent=self._actor.user_agent,
        )
        try:
            self._sink.append(entry)
        except Exception as exc:  # noqa: BLE001
            self.failures += 1
            logger.warning(
                "Audit append failed action=%s entity_type=%s entity_id=%s: %s",
                action,
                entity_type,
                entity_id,
                exc,
            )
            return False
        return True
