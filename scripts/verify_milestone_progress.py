"""
Report completion-percentage and status distribution of stored milestones.
"""

from __future__ import annotations

import argparse
import logging

from sqlalchemy.orm import sessionmaker

from app.logging_utils import configure_logging
from app.services.milestone_progress_report import build_progress_report
from db.repositories.errors import StoreError
from db.session import session_scope

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None, *, session_factory: sessionmaker | None = None) -> int:
    configure_logging()
    parser = argparse.ArgumentParser(description="Verify milestone progress after an import.")
    parser.add_argument(
        "--anomaly-limit",
        dest="anomaly_limit",
        type=int,
        default=50,
        help="Maximum number of Completed-at-0%% milestones to list.",
    )
    args = parser.parse_args(argv)

    try:
        with session_scope(session_factory) as session:
            report = build_progress_report(session, anomaly_limit=args.anomaly_limit)
    except (StoreError, RuntimeError) as exc:
        logger.error("Milestone progress report failed: %s", exc)
        return 1

    print(report.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
