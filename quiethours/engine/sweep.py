"""Reminder sweep: find blocks starting soon, notify owners, mark them done.

One sweep is a single sequential pass. "Now" is sampled once and held for the
whole pass. Per-block failures are collected into the result and never abort
the pass; only a failure to select due blocks propagates.

The block store must provide `find_due(now, until)` and
`mark_reminder_sent(block_id) -> bool`; the notifier must provide
`resolve_contact(user_id) -> Optional[str]` and
`deliver(address, subject, body) -> bool`.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from quiethours.engine.reminder_email import render_reminder_email
from quiethours.models.constants import DEFAULT_LOOKAHEAD_MINUTES
from quiethours.models.study_block import StudyBlock, to_utc_naive, utc_now
from quiethours.models.sweep import SweepResult

logger = logging.getLogger(__name__)


class SweepSelectionError(Exception):
    """The due-block query failed; the sweep produced no result."""


def run_sweep(
    store,
    notifier,
    lookahead_minutes: int = DEFAULT_LOOKAHEAD_MINUTES,
    now: Optional[datetime] = None,
) -> SweepResult:
    """Run one reminder sweep.

    Args:
        store: Block store (see module docstring)
        notifier: Notifier (see module docstring)
        lookahead_minutes: Lead time; blocks starting within [now, now + lookahead] are due
        now: Fixed sweep time (defaults to the current UTC time)

    Returns:
        SweepResult with counts and per-block errors

    Raises:
        ValueError: If lookahead_minutes is not positive
        SweepSelectionError: If the due-block query fails
    """
    if lookahead_minutes <= 0:
        raise ValueError(f"lookahead_minutes must be positive, got {lookahead_minutes}")

    now = to_utc_naive(now) if now is not None else utc_now()
    until = now + timedelta(minutes=lookahead_minutes)
    logger.info(f"Running reminder sweep at {now.isoformat()}Z (window until {until.isoformat()}Z)")

    try:
        due_blocks = list(store.find_due(now, until))
    except Exception as e:
        logger.error(f"Failed to select due blocks: {type(e).__name__}: {str(e)}")
        raise SweepSelectionError(f"Failed to select due blocks: {e}") from e

    result = SweepResult(blocks_found=len(due_blocks), timestamp=now)
    if not due_blocks:
        logger.info("No upcoming blocks found")
        return result

    logger.info(f"Found {len(due_blocks)} blocks needing reminders")
    for block in due_blocks:
        error = _process_block(block, store, notifier, lookahead_minutes)
        if error is None:
            result.reminders_sent += 1
        else:
            logger.error(error)
            result.errors.append(error)

    logger.info(
        f"Sweep completed: found={result.blocks_found} sent={result.reminders_sent} "
        f"errors={len(result.errors)} success_rate={result.success_rate}%"
    )
    return result


def _process_block(block: StudyBlock, store, notifier, lookahead_minutes: int) -> Optional[str]:
    """Resolve, render, deliver and mark one block. Returns an error description, or None on success."""
    block_id = block.block_id
    logger.debug(f"Processing block {block_id}")

    try:
        address = notifier.resolve_contact(block.user_id)
    except Exception as e:
        logger.debug(f"Contact lookup raised for user {block.user_id}: {type(e).__name__}: {str(e)}")
        address = None
    if not address:
        return f"User not found or no email for block {block_id}"

    try:
        email = render_reminder_email(block.start_time, block.end_time, lead_minutes=lookahead_minutes)
        delivered = notifier.deliver(address, email.subject, email.html)
    except Exception as e:
        return f"Error processing block {block_id}: {e}"
    if not delivered:
        return f"Failed to send email for block {block_id}"

    # The email is out; from here a failure can only lead to a duplicate on a later sweep.
    try:
        marked = store.mark_reminder_sent(block_id)
    except Exception as e:
        return f"Failed to mark reminder as sent for block {block_id}: {e}"
    if not marked:
        return f"Failed to mark reminder as sent for block {block_id}"

    logger.info(f"Reminder sent for block {block_id}")
    return None
