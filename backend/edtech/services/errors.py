"""
Domain exceptions.

Only configuration, quota, extraction and permission failures halt the
user's current action. Remote-store failures never reach callers, and a
failed completion stream becomes an error message in the transcript
instead of an exception.
"""

from edtech.services.quota import DenialReason


class EdtechError(Exception):
    """Base class for errors surfaced to the user."""


class SetupRequiredError(EdtechError):
    """The completion service credential is not configured."""

    def __init__(self, message: str = "Setup required: the AI service API key is not configured.") -> None:
        super().__init__(message)


class QuotaExceededError(EdtechError):
    """A document upload was denied by the plan quota."""

    def __init__(self, reason: DenialReason, message: str) -> None:
        self.reason = reason
        super().__init__(message)


class ExtractionError(EdtechError):
    """Text could not be extracted from an uploaded file."""


class PermissionDeniedError(EdtechError):
    """The profile's role does not allow the action."""


class NotFoundError(EdtechError):
    """A referenced record does not exist for this owner."""
