import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse
from datetime import date

import structlog

from vacation_booking.db.engine import engine
from vacation_booking.logging_config import setup_logging
from vacation_booking.services.bookings import complete_finished_stays

setup_logging()
logger = structlog.get_logger(__name__)


def main(today: date | None = None) -> int:
    """
    Mark confirmed bookings whose check-out date has arrived as completed.

    Intended to run daily from cron or a Kubernetes CronJob.
    """
    try:
        return complete_finished_stays(engine, today=today)
    except Exception:
        logger.exception("complete_stays_failed")
        raise


# === CLI ===

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Complete finished booking stays.")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        help="Treat this YYYY-MM-DD date as today (defaults to the current UTC date)",
    )
    args = parser.parse_args()

    main(today=args.date)
