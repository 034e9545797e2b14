"""Request/response models for the Quiet Hours API."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_serializer

from quiethours.models.study_block import StudyBlock, utc_isoformat
from quiethours.models.sweep import SchedulerStatus


class BlockCreateRequest(BaseModel):
    """Request model for creating a study block."""
    start_time: datetime = Field(..., description="Block start (ISO 8601; naive values are treated as UTC)")
    end_time: datetime = Field(..., description="Block end (ISO 8601; naive values are treated as UTC)")


class BlockResponse(BaseModel):
    block: StudyBlock


class BlockListResponse(BaseModel):
    blocks: List[StudyBlock]


class MessageResponse(BaseModel):
    message: str


class CronTriggerRequest(BaseModel):
    """Optional body for POST /reminders/run."""
    token: Optional[str] = None


class SweepResponse(BaseModel):
    """Response for a triggered reminder sweep."""
    success: bool = True
    blocks_found: int
    reminders_sent: int
    errors: List[str]
    success_rate: int
    timestamp: datetime

    @field_serializer("timestamp", when_used="json")
    def _serialize_timestamp(self, value: datetime) -> str:
        return utc_isoformat(value)


class SchedulerActionRequest(BaseModel):
    action: str = Field("", description="\"start\" or \"stop\"")
    token: Optional[str] = None


class SchedulerResponse(BaseModel):
    status: str = "success"
    message: Optional[str] = None
    scheduler: SchedulerStatus
    timestamp: datetime

    @field_serializer("timestamp", when_used="json")
    def _serialize_timestamp(self, value: datetime) -> str:
        return utc_isoformat(value)
