"""Pydantic schemas for domain records and API request/response validation."""

from edtech.schemas.user import PlanUpgradeRequest, UserProfile
from edtech.schemas.documents import DocumentListResponse, DocumentRead, DocumentRecord
from edtech.schemas.events import ScheduleEvent, ScheduleEventCreate
from edtech.schemas.chat import (
    AssessmentRequest,
    ChatMessageRequest,
    LessonPlanRequest,
    Message,
    RubricRequest,
    Suggestion,
    TranscriptResponse,
)
from edtech.schemas.admin import (
    AdminStatsRead,
    SystemInstructionRead,
    SystemInstructionUpdate,
    UsageStats,
    UserListResponse,
)

__all__ = [
    # User
    "UserProfile",
    "PlanUpgradeRequest",
    # Documents
    "DocumentRecord",
    "DocumentRead",
    "DocumentListResponse",
    # Events
    "ScheduleEvent",
    "ScheduleEventCreate",
    # Chat
    "Message",
    "Suggestion",
    "ChatMessageRequest",
    "RubricRequest",
    "LessonPlanRequest",
    "AssessmentRequest",
    "TranscriptResponse",
    # Admin
    "SystemInstructionRead",
    "SystemInstructionUpdate",
    "UsageStats",
    "AdminStatsRead",
    "UserListResponse",
]
