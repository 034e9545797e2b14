"""Reminder engine for Quiet Hours."""

from quiethours.engine.reminder_email import render_reminder_email, ReminderEmail
from quiethours.engine.sweep import run_sweep, SweepSelectionError
from quiethours.engine.scheduler import (
    ReminderScheduler,
    get_scheduler,
    init_scheduler,
    reset_scheduler,
    start_scheduler,
    stop_scheduler,
    get_scheduler_status,
)

__all__ = [
    "render_reminder_email",
    "ReminderEmail",
    "run_sweep",
    "SweepSelectionError",
    "ReminderScheduler",
    "get_scheduler",
    "init_scheduler",
    "reset_scheduler",
    "start_scheduler",
    "stop_scheduler",
    "get_scheduler_status",
]
