"""Admin schemas."""

from typing import Literal

from pydantic import BaseModel, Field

from edtech.schemas.base import BaseSchema, RecordSchema
from edtech.schemas.user import UserProfile

StatKeyType = Literal["docs", "queries"]


class SystemInstructionRead(BaseSchema):
    """Current system instruction."""

    text: str
    is_default: bool


class SystemInstructionUpdate(BaseSchema):
    """Replace the system instruction."""

    text: str = Field(..., min_length=1, max_length=20000)


class UsageStats(RecordSchema):
    """Process-wide counters: documents uploaded and chat turns started."""

    docs: int = 0
    queries: int = 0


class AdminStatsRead(BaseSchema):
    """Dashboard totals."""

    users: int
    docs: int
    queries: int


class UserListResponse(BaseModel):
    """Stored profiles, oldest first."""

    users: list[UserProfile]
    total: int
