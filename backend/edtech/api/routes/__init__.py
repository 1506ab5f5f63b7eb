"""API routes package."""

from edtech.api.routes import (
    admin,
    chat,
    documents,
    events,
    profile,
)

__all__ = [
    "admin",
    "chat",
    "documents",
    "events",
    "profile",
]
