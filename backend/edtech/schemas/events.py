"""Schedule event schemas."""

import datetime as dt
from datetime import datetime
from uuid import UUID, uuid4

from pydantic import Field

from edtech.schemas.base import BaseSchema, RecordSchema, utcnow


class ScheduleEvent(RecordSchema):
    """Calendar entry. Created and deleted by its owner, never updated."""

    id: UUID = Field(default_factory=uuid4)
    owner_id: UUID
    title: str = Field(..., min_length=1, max_length=255)
    date: dt.date
    category: str = "general"
    created_at: datetime = Field(default_factory=utcnow)


class ScheduleEventCreate(BaseSchema):
    """Schema for creating a schedule event."""

    title: str = Field(..., min_length=1, max_length=255)
    date: dt.date
    category: str = Field("general", min_length=1, max_length=64)
