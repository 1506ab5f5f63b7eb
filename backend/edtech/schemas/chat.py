"""Pydantic schemas for chat and content generation."""

from datetime import datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from edtech.schemas.base import BaseSchema, RecordSchema, utcnow

ChatRoleType = Literal["user", "assistant"]
SuggestionActionType = Literal["quiz", "rubric", "chat"]
OutputFormatType = Literal["auto", "report", "table", "concise", "step"]
IntentType = Literal["lesson", "quiz", "none"]


# Transcript records
class Suggestion(RecordSchema):
    """Follow-up action offered after an assistant response."""

    label: str
    action: SuggestionActionType
    prompt: str | None = None


class Message(RecordSchema):
    """One entry of a user's transcript."""

    id: UUID = Field(default_factory=uuid4)
    role: ChatRoleType
    text: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    is_error: bool = False
    format: OutputFormatType | None = None
    suggestions: list[Suggestion] = Field(default_factory=list)


# Request schemas
class ChatMessageRequest(BaseModel):
    """Request to send a chat message."""

    message: str = Field(..., min_length=1, max_length=10000)
    format: OutputFormatType = "auto"
    document_id: UUID | None = None
    include_document: bool | None = None
    intent: IntentType | None = None
    thinking: bool = False


class RubricRequest(BaseSchema):
    """Rubric generator settings."""

    assignment: str = Field(..., min_length=1, max_length=500)
    grade_level: str = Field(..., min_length=1, max_length=100)
    scale: Literal["3", "4", "5"] = "4"
    blooms_level: str = "Mixed"
    objectives: str = ""
    use_active_doc: bool = True
    document_id: UUID | None = None


class LessonPlanRequest(BaseSchema):
    """Lesson plan generator settings."""

    template_id: Literal["5e", "direct", "ubd"] = "5e"
    topic: str = Field(..., min_length=1, max_length=500)
    grade_level: str = Field(..., min_length=1, max_length=100)
    duration: str = ""
    objectives: str = ""
    standards: str = ""
    use_active_doc: bool = True
    document_id: UUID | None = None


class AssessmentRequest(BaseSchema):
    """Quiz / assessment generator settings."""

    type: Literal["mixed", "mcq", "srq", "erq"] = "mixed"
    topic: str = Field(..., min_length=1, max_length=500)
    grade_level: str = Field(..., min_length=1, max_length=100)
    difficulty: Literal["easy", "medium", "hard"] = "medium"
    count: int = Field(10, ge=1, le=50)
    include_key: bool = True
    use_active_doc: bool = True
    document_id: UUID | None = None


# Response schemas
class TranscriptResponse(BaseModel):
    """The user's full transcript."""

    messages: list[Message]
    total: int
