"""
Maintenance jobs for stored projects.

    python -m estimator.maintenance repair            # heal unnamed custom work items
    python -m estimator.maintenance migrate-deposits  # move legacy deposits into payments
"""

import argparse
import json
import logging
import sys

from .config import settings
from .database import SessionLocal
from .repair import migrate_legacy_deposits, repair_all_projects

logger = logging.getLogger(__name__)

JOBS = {
    "repair": repair_all_projects,
    "migrate-deposits": migrate_legacy_deposits,
}


def run_job(name: str, session_factory=SessionLocal) -> dict:
    """Run one maintenance job in its own session and return its report."""
    job = JOBS[name]
    db = session_factory()
    try:
        return job(db)
    finally:
        db.close()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Project maintenance jobs")
    parser.add_argument("job", choices=sorted(JOBS), help="job to run")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    report = run_job(args.job, session_factory=SessionLocal)
    print(json.dumps(report, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
