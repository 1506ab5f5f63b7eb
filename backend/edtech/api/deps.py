"""
FastAPI Dependencies for storage, authentication and the conversation controller.

Key patterns:
1. get_repository: one process-wide repository; remote-with-fallback when the
   remote store is configured, local-only otherwise
2. get_current_profile: resolves the session token to a UserProfile
3. No global "current user" state - always pass the profile explicitly

Security model:
- JWT stored in HttpOnly cookie or Authorization header
- All per-user queries are scoped by owner id inside the repository
- Role checks happen in the controller, not middleware
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Cookie, Depends, Header, HTTPException, status

from edtech.config import get_settings
from edtech.db.session import get_sessionmaker, is_remote_available
from edtech.schemas.user import UserProfile
from edtech.services.completion import CompletionStream
from edtech.services.conversation import ConversationController
from edtech.services.local_store import LocalStore
from edtech.services.repository import (
    EntityRepository,
    FallbackRepository,
    LocalRepository,
    RemoteRepository,
)


# =============================================================================
# STORAGE
# =============================================================================


@lru_cache
def get_repository() -> EntityRepository:
    """Build the process-wide repository once, based on the backing store decision."""
    settings = get_settings()
    local = LocalRepository(LocalStore(settings.local_store_path))
    if not is_remote_available():
        return local
    return FallbackRepository(RemoteRepository(get_sessionmaker()), local)


Repository = Annotated[EntityRepository, Depends(get_repository)]


def get_controller(repository: Repository) -> ConversationController:
    """A controller per request; its state machine covers that request's turn."""
    settings = get_settings()
    return ConversationController(
        repository,
        CompletionStream(),
        api_key=settings.anthropic_api_key,
        max_document_chars=settings.document_context_max_chars,
    )


Controller = Annotated[ConversationController, Depends(get_controller)]


# =============================================================================
# AUTHENTICATION DEPENDENCIES
# =============================================================================


async def get_token_from_request(
    authorization: Annotated[str | None, Header()] = None,
    access_token: Annotated[str | None, Cookie()] = None,
) -> str:
    """
    Extract JWT token from request.

    Supports two methods (in order of preference):
    1. HttpOnly cookie named 'access_token'
    2. Authorization header: 'Bearer <token>'
    """
    if access_token:
        return access_token

    if authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_profile(
    token: Annotated[str, Depends(get_token_from_request)],
    repository: Repository,
) -> UserProfile:
    """
    Resolve the session token to a profile.

    Raises 401 if the token is invalid or expired. A valid token whose
    profile cannot be read still gets a default free-plan profile.
    """
    profile = await repository.get_profile(token)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return profile


CurrentProfile = Annotated[UserProfile, Depends(get_current_profile)]
