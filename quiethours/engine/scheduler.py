"""Reminder scheduler: runs the reminder sweep at a fixed cadence.

The repeating task is an APScheduler interval job; its job handle is the
cancellation token. There is one scheduler per process, reachable through
`get_scheduler()`. Callers that need explicit wiring (for example tests)
install their own instance with `init_scheduler()`.
"""

import logging
import os
import threading
from typing import Any, Callable, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler

from quiethours.models.constants import DEFAULT_CHECK_INTERVAL_MS
from quiethours.models.sweep import SchedulerStatus

logger = logging.getLogger(__name__)

JOB_ID = "reminder-sweep"


class ReminderScheduler:
    """Owns the single recurring reminder job.

    States are Stopped (no job handle) and Running (one job handle).
    `start()` and `stop()` are idempotent.
    """

    def __init__(
        self,
        sweep: Callable[[], Any],
        check_interval_ms: int = DEFAULT_CHECK_INTERVAL_MS,
        job_scheduler: Optional[BaseScheduler] = None,
    ):
        """Initialize the scheduler in the Stopped state.

        Args:
            sweep: Zero-argument callable that runs one reminder sweep
            check_interval_ms: Cadence between ticks in milliseconds
            job_scheduler: APScheduler instance to arm the job on. If None, a
                background scheduler is created on first start.
        """
        if check_interval_ms <= 0:
            raise ValueError(f"check_interval_ms must be positive, got {check_interval_ms}")
        self._sweep = sweep
        self.check_interval_ms = check_interval_ms
        self._job_scheduler = job_scheduler
        self._owns_job_scheduler = job_scheduler is None
        self._job = None
        self._state_lock = threading.Lock()
        self._sweep_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._job is not None

    def start(self) -> None:
        """Run one sweep now and repeat it every interval. No-op if already running.

        The job is armed first (its first fire is one interval away) and the
        immediate sweep runs after the state lock is released, so a concurrent
        `stop()` is never held up by it. If a sweep from an earlier run is still
        in flight, the immediate sweep waits for it instead of being skipped.
        """
        with self._state_lock:
            if self._job is not None:
                logger.warning("Reminder scheduler is already running")
                return

            logger.info(f"Starting reminder scheduler (check interval {self.check_interval_ms / 1000:g}s)")
            self._job = self._ensure_job_scheduler().add_job(
                self.tick,
                "interval",
                seconds=self.check_interval_ms / 1000,
                id=JOB_ID,
                max_instances=1,
                coalesce=True,
                replace_existing=True,
            )
        logger.info("Reminder scheduler started")
        self.tick(wait=True)

    def stop(self) -> None:
        """Cancel future ticks. An in-flight sweep runs to completion. No-op if stopped."""
        with self._state_lock:
            if self._job is None:
                logger.warning("Reminder scheduler is not running")
                return

            logger.info("Stopping reminder scheduler")
            try:
                self._job.remove()
            except JobLookupError:
                logger.warning(f"Reminder job {JOB_ID} was already removed")
            self._job = None
        logger.info("Reminder scheduler stopped")

    def status(self) -> SchedulerStatus:
        return SchedulerStatus(is_running=self.is_running, check_interval_ms=self.check_interval_ms)

    def tick(self, wait: bool = False) -> Any:
        """Run one sweep, swallowing any exception so the job keeps firing.

        A tick that arrives while a previous sweep is still in flight is skipped,
        unless `wait` is set, in which case it runs once that sweep finishes.
        """
        if not self._sweep_lock.acquire(blocking=wait):
            logger.warning("Previous reminder sweep still running; skipping this tick")
            return None
        try:
            return self._sweep()
        except Exception:
            logger.exception("Reminder sweep failed")
            return None
        finally:
            self._sweep_lock.release()

    def shutdown(self) -> None:
        """Stop, and shut down the background scheduler if this instance created it."""
        if self.is_running:
            self.stop()
        if self._owns_job_scheduler and self._job_scheduler is not None and self._job_scheduler.running:
            self._job_scheduler.shutdown(wait=False)
            self._job_scheduler = None

    def _ensure_job_scheduler(self) -> BaseScheduler:
        if self._job_scheduler is None:
            self._job_scheduler = BackgroundScheduler(timezone="UTC", daemon=True)
        if not self._job_scheduler.running:
            self._job_scheduler.start()
        return self._job_scheduler


def get_check_interval_ms() -> int:
    return int(os.getenv("REMINDER_CHECK_INTERVAL_MS", str(DEFAULT_CHECK_INTERVAL_MS)))


def build_default_scheduler() -> ReminderScheduler:
    """Scheduler wired to the application database and SMTP settings."""
    from quiethours.engine.sweep_runner import run_default_sweep

    return ReminderScheduler(run_default_sweep, check_interval_ms=get_check_interval_ms())


# Process-wide instance
_scheduler: Optional[ReminderScheduler] = None
_scheduler_lock = threading.Lock()


def get_scheduler() -> ReminderScheduler:
    """Return the process-wide scheduler, building the default one on first access."""
    global _scheduler
    with _scheduler_lock:
        if _scheduler is None:
            _scheduler = build_default_scheduler()
        return _scheduler


def init_scheduler(scheduler: ReminderScheduler) -> ReminderScheduler:
    """Install an explicitly wired scheduler, shutting down any previous one."""
    global _scheduler
    with _scheduler_lock:
        previous, _scheduler = _scheduler, scheduler
    if previous is not None and previous is not scheduler:
        previous.shutdown()
    return scheduler


def reset_scheduler() -> None:
    """Shut down and discard the process-wide scheduler."""
    global _scheduler
    with _scheduler_lock:
        previous, _scheduler = _scheduler, None
    if previous is not None:
        previous.shutdown()


def start_scheduler() -> None:
    get_scheduler().start()


def stop_scheduler() -> None:
    get_scheduler().stop()


def get_scheduler_status() -> SchedulerStatus:
    return get_scheduler().status()
