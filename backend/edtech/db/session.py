"""
Backing store selection and database session management.

Whether the remote store is used is decided once per process from the
configured URL. A malformed or placeholder URL means the local fallback
store is used for the lifetime of the process; nothing re-checks later.
"""

import logging
from functools import lru_cache

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from edtech.config import get_settings

logger = logging.getLogger(__name__)

_PLACEHOLDER_MARKERS = ("changeme", "your-", "your_", "<", ">", "example", "placeholder")


def is_valid_remote_url(url: str | None) -> bool:
    """Check that a database URL is non-empty, not a placeholder, and well-formed."""
    if not url or not url.strip():
        return False
    lowered = url.lower()
    if any(marker in lowered for marker in _PLACEHOLDER_MARKERS):
        return False
    try:
        parsed = make_url(url.strip())
    except ArgumentError:
        return False
    if not parsed.drivername:
        return False
    if parsed.get_backend_name() == "sqlite":
        return bool(parsed.database)
    return bool(parsed.host and parsed.database)


@lru_cache
def is_remote_available() -> bool:
    """Process-wide capability flag: True when the remote store is configured."""
    settings = get_settings()
    available = is_valid_remote_url(settings.database_url_async)
    if available:
        logger.info("Remote store configured; using it with local fallback")
    else:
        logger.info("Remote store not configured; using local store only")
    return available


@lru_cache
def get_engine() -> AsyncEngine:
    """Build the shared async engine. Only call when the remote store is available."""
    settings = get_settings()
    url = settings.database_url_async
    kwargs: dict = {"echo": settings.debug, "pool_pre_ping": True}
    if make_url(url).get_backend_name() == "postgresql":
        kwargs.update(pool_size=5, max_overflow=10)
        if settings.database_requires_ssl:
            kwargs["connect_args"] = {"ssl": "require"}
    return create_async_engine(url, **kwargs)


@lru_cache
def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the shared engine."""
    return async_sessionmaker(
        bind=get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
