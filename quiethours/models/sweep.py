"""Reminder sweep and scheduler state models."""

import math
from datetime import datetime
from typing import List
from pydantic import BaseModel, Field, field_serializer

from quiethours.models.study_block import utc_isoformat


class SweepResult(BaseModel):
    """Outcome of one reminder sweep. Ephemeral, never persisted."""

    blocks_found: int = Field(0, description="Number of due blocks selected")
    reminders_sent: int = Field(0, description="Number of blocks delivered and marked")
    errors: List[str] = Field(default_factory=list, description="Per-block failures in encounter order")
    timestamp: datetime = Field(..., description="The 'now' sampled at sweep start (UTC)")

    @field_serializer("timestamp", when_used="json")
    def _serialize_timestamp(self, value: datetime) -> str:
        return utc_isoformat(value)

    @property
    def success_rate(self) -> int:
        """Percentage of found blocks that were fully processed (0 when none were found)."""
        if self.blocks_found == 0:
            return 0
        return int(math.floor(100 * self.reminders_sent / self.blocks_found + 0.5))


class SchedulerStatus(BaseModel):
    """Read-only view of the reminder scheduler."""

    is_running: bool
    check_interval_ms: int
