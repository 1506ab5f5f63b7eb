"""Base schema configuration."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict


def utcnow() -> datetime:
    """Timezone-aware current time used for record timestamps."""
    return datetime.now(timezone.utc)


class BaseSchema(BaseModel):
    """Base schema with common configuration for request/response bodies."""

    model_config = ConfigDict(
        from_attributes=True,  # Enable ORM mode
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class RecordSchema(BaseModel):
    """
    Base for persisted domain records.

    No whitespace stripping: message text is streamed in chunks whose
    leading and trailing spaces are significant.
    """

    model_config = ConfigDict(
        from_attributes=True,
        validate_assignment=True,
    )
