"""StudyBlock data model for Quiet Hours."""

import math
import uuid
from datetime import datetime, timezone
from pydantic import BaseModel, Field, field_serializer, field_validator


def utc_now() -> datetime:
    """Current time as a naive UTC datetime (the storage convention)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: datetime) -> datetime:
    """Normalize a datetime to naive UTC.

    Aware values are converted to UTC; naive values are assumed to already be UTC.
    """
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def utc_isoformat(value: datetime) -> str:
    """ISO 8601 with an explicit +00:00 offset, e.g. '2024-01-01T10:00:00+00:00'."""
    return to_utc_naive(value).replace(tzinfo=timezone.utc).isoformat()


def new_block_id() -> str:
    return uuid.uuid4().hex


def duration_minutes(start_time: datetime, end_time: datetime) -> int:
    """Whole minutes between start and end, rounded half up."""
    seconds = (to_utc_naive(end_time) - to_utc_naive(start_time)).total_seconds()
    return int(math.floor(seconds / 60 + 0.5))


class StudyBlock(BaseModel):
    """StudyBlock represents one scheduled quiet-study interval."""
    
    block_id: str = Field(..., description="Unique block identifier (opaque, immutable)")
    user_id: str = Field(..., description="User ID who owns this block")
    start_time: datetime = Field(..., description="Block start time (UTC)")
    end_time: datetime = Field(..., description="Block end time (UTC)")
    reminder_sent: bool = Field(False, description="Whether the reminder email has been sent")
    created_at: datetime = Field(..., description="Block creation timestamp (UTC)")

    @field_validator("start_time", "created_at")
    @classmethod
    def _normalize_utc(cls, value: datetime) -> datetime:
        return to_utc_naive(value)

    @field_validator("end_time")
    @classmethod
    def _end_after_start(cls, value: datetime, info) -> datetime:
        value = to_utc_naive(value)
        start_time = info.data.get("start_time")
        if start_time is not None and value <= start_time:
            raise ValueError("end_time must be after start_time")
        return value

    @field_serializer("start_time", "end_time", "created_at", when_used="json")
    def _serialize_utc(self, value: datetime) -> str:
        return utc_isoformat(value)

    @property
    def duration_minutes(self) -> int:
        return duration_minutes(self.start_time, self.end_time)
