"""Document schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from edtech.schemas.base import BaseSchema, RecordSchema, utcnow

DocumentKindType = Literal["pdf", "docx", "txt"]


class DocumentRecord(RecordSchema):
    """
    An uploaded document after text extraction.

    `content` is always plain text; the uploaded bytes are never kept.
    """

    id: UUID = Field(default_factory=uuid4)
    owner_id: UUID
    name: str
    kind: DocumentKindType
    content: str
    size_bytes: int = Field(..., ge=0)
    created_at: datetime = Field(default_factory=utcnow)


class DocumentRead(BaseSchema):
    """Document metadata without the extracted text."""

    id: UUID
    name: str
    kind: DocumentKindType
    size_bytes: int
    content_chars: int
    created_at: datetime

    @classmethod
    def from_record(cls, record: DocumentRecord) -> "DocumentRead":
        return cls(
            id=record.id,
            name=record.name,
            kind=record.kind,
            size_bytes=record.size_bytes,
            content_chars=len(record.content),
            created_at=record.created_at,
        )


class DocumentListResponse(BaseModel):
    """List of documents with the plan limits that apply to them."""

    documents: list[DocumentRead]
    total: int
    max_docs: int
    max_size_bytes: int
