"""User profile schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field

from edtech.schemas.base import BaseSchema, RecordSchema, utcnow

RoleType = Literal["user", "admin"]
PlanType = Literal["free", "pro", "campus"]


class UserProfile(RecordSchema):
    """Profile of the signed-in user as the assistant sees it."""

    id: UUID
    name: str = "Educator"
    email: str | None = None
    role: RoleType = "user"
    plan: PlanType = "free"
    joined_at: datetime = Field(default_factory=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @classmethod
    def default_for(cls, user_id: UUID) -> "UserProfile":
        """Minimal profile used when the stored one cannot be read."""
        return cls(id=user_id, role="user", plan="free")


class PlanUpgradeRequest(BaseSchema):
    """Request to move the current user to another plan tier."""

    plan: PlanType
