"""
Import a milestone CSV export from CLI.

Exit codes: 0 on a completed run (rejected rows included), 1 when the run
aborts, 2 on invalid arguments.
"""

from __future__ import annotations

import argparse
import json
import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.config import get_milestone_import_settings, normalize_delimiter
from app.domain.milestone_import import ActorContext, ImportSummary
from app.logging_utils import configure_logging
from app.repositories.audit_log_repository import SqlAlchemyAuditSink
from app.repositories.milestone_store import SqlAlchemyMilestoneStore
from app.schemas.milestone_import import MilestoneImportSummaryResponse
from app.services.milestone_import_service import MilestoneImportError, MilestoneImportService
from db.repositories.milestone_job_repository import MilestoneImportJobRepository
from db.session import session_scope

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "milestone-import-cli"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Import milestones from a delimited CSV export.")
    parser.add_argument("path", help="Path to the milestone CSV file.")
    parser.add_argument(
        "--actor-id",
        dest="actor_id",
        type=int,
        default=None,
        help="User id recorded on audit entries and as milestone creator.",
    )
    parser.add_argument(
        "--department-id",
        dest="department_id",
        type=int,
        default=None,
        help="Department id recorded on audit entries.",
    )
    parser.add_argument("--ip-address", dest="ip_address", default=None)
    parser.add_argument("--user-agent", dest="user_agent", default=DEFAULT_USER_AGENT)
    parser.add_argument(
        "--delimiter",
        dest="delimiter",
        default=None,
        help="';', ',', 'tab' or 'auto'. Defaults to MILESTONE_IMPORT_DELIMITER.",
    )
    parser.add_argument(
        "--encoding",
        dest="encoding",
        default=None,
        help="Source encoding. Defaults to MILESTONE_IMPORT_ENCODING.",
    )
    parser.add_argument(
        "--track-job",
        dest="track_job",
        action="store_true",
        help="Record the run in ingestion_jobs.",
    )
    return parser


def _build_service(args: argparse.Namespace) -> MilestoneImportService:
    settings = get_milestone_import_settings()
    return MilestoneImportService(
        delimiter=normalize_delimiter(args.delimiter, settings.delimiter),
        encoding=args.encoding or settings.encoding,
        max_recorded_issues=settings.max_recorded_issues,
        log_rejections=settings.log_rejections,
    )


def _start_job(session: Session, args: argparse.Namespace) -> int | None:
    try:
        job = MilestoneImportJobRepository(session).start(
            source=args.path,
            delimiter=args.delimiter,
            actor_id=args.actor_id,
        )
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.warning("Could not record milestone import job: %s", exc)
        return None
    return job.id


def _finish_job(
    session: Session,
    job_id: int | None,
    *,
    summary: ImportSummary,
    error_message: str | None = None,
) -> None:
    if job_id is None:
        return
    repository = MilestoneImportJobRepository(session)
    try:
        if error_message is None:
            repository.mark_completed(job_id, summary)
        else:
            repository.mark_failed(job_id, error_message, summary)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.warning("Could not update milestone import job id=%s: %s", job_id, exc)


def run_import(
    args: argparse.Namespace,
    *,
    session_factory: sessionmaker | None = None,
) -> tuple[int, dict[str, Any]]:
    """
    Run one import and return ``(exit_code, report)``.
    """

    service = _build_service(args)
    actor = ActorContext(
        actor_id=args.actor_id,
        department_id=args.department_id,
        ip_address=args.ip_address,
        user_agent=args.user_agent,
    )

    with session_scope(session_factory) as session:
        job_id = _start_job(session, args) if args.track_job else None
        try:
            summary = service.run(
                args.path,
                store=SqlAlchemyMilestoneStore(session),
                actor=actor,
                audit_sink=SqlAlchemyAuditSink(session),
            )
        except MilestoneImportError as exc:
            logger.error("Milestone import aborted: %s", exc)
            session.rollback()
            _finish_job(session, job_id, summary=exc.summary, error_message=str(exc))
            return 1, {
                "status": "failed",
                "error": str(exc),
                "job_id": job_id,
                "summary": MilestoneImportSummaryResponse.from_summary(exc.summary).model_dump(),
            }

        _finish_job(session, job_id, summary=summary)
        return 0, {
            "status": "completed",
            "job_id": job_id,
            "summary": MilestoneImportSummaryResponse.from_summary(summary).model_dump(),
        }


def main(argv: list[str] | None = None, *, session_factory: sessionmaker | None = None) -> int:
    configure_logging()
    args = _build_parser().parse_args(argv)

    try:
        exit_code, report = run_import(args, session_factory=session_factory)
    except RuntimeError as exc:
        logger.error("Milestone import could not start: %s", exc)
        exit_code, report = 1, {"status": "failed", "error": str(exc)}

    print(json.dumps(report, indent=2, default=str))
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
