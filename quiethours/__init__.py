"""Quiet Hours: study blocks with one-time email reminders."""

__version__ = "0.1.0"
