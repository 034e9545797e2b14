"""Data models for Quiet Hours."""

from quiethours.models.study_block import StudyBlock, duration_minutes, new_block_id, to_utc_naive, utc_now
from quiethours.models.sweep import SweepResult, SchedulerStatus
from quiethours.models.user import User

__all__ = [
    "StudyBlock",
    "duration_minutes",
    "new_block_id",
    "to_utc_naive",
    "utc_now",
    "SweepResult",
    "SchedulerStatus",
    "User",
]
