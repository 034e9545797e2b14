"""One-shot reminder sweep runner.

Opens its own database session, runs a single sweep and logs the summary.
Intended for external cron jobs:

    python -m quiethours.engine.sweep_runner --lookahead 10

Exit code is 0 when the sweep ran (even with per-block errors), 1 when due
blocks could not be selected, and 2 for invalid arguments.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from quiethours.database.database import SessionLocal
from quiethours.database.study_block_repository import StudyBlockRepository
from quiethours.database.user_repository import UserRepository
from quiethours.engine.notifier import ReminderNotifier
from quiethours.engine.sweep import SweepSelectionError, run_sweep
from quiethours.integrations.email_client import SMTPEmailClient
from quiethours.models.constants import DEFAULT_LOOKAHEAD_MINUTES
from quiethours.models.sweep import SweepResult

logger = logging.getLogger(__name__)


def get_lookahead_minutes() -> int:
    """Read REMINDER_LOOKAHEAD_MINUTES, falling back to the default when unset or not a positive integer."""
    raw = os.getenv("REMINDER_LOOKAHEAD_MINUTES")
    if raw is None or raw.strip() == "":
        return DEFAULT_LOOKAHEAD_MINUTES
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value <= 0:
        logger.warning(
            f"Ignoring invalid REMINDER_LOOKAHEAD_MINUTES={raw!r}; using {DEFAULT_LOOKAHEAD_MINUTES}"
        )
        return DEFAULT_LOOKAHEAD_MINUTES
    return value


def positive_int(value: str) -> int:
    """argparse type for strictly positive integers."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {number}")
    return number


def run_default_sweep(lookahead_minutes: Optional[int] = None) -> SweepResult:
    """Run one sweep against the application database and SMTP settings."""
    if lookahead_minutes is None:
        lookahead_minutes = get_lookahead_minutes()
    db = SessionLocal()
    try:
        notifier = ReminderNotifier(UserRepository(db), SMTPEmailClient())
        return run_sweep(StudyBlockRepository(db), notifier, lookahead_minutes=lookahead_minutes)
    finally:
        db.close()


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send reminders for study blocks starting soon.")
    parser.add_argument(
        "--lookahead",
        type=positive_int,
        default=None,
        help="Reminder lead time in minutes (defaults to REMINDER_LOOKAHEAD_MINUTES or 10)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    try:
        result = run_default_sweep(args.lookahead)
    except SweepSelectionError as e:
        logger.error(f"Reminder sweep failed: {e}")
        return 1

    logger.info(
        f"Reminder sweep: found={result.blocks_found} sent={result.reminders_sent} "
        f"success_rate={result.success_rate}%"
    )
    for error in result.errors:
        logger.warning(f"  {error}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    sys.exit(main())
