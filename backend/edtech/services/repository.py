"""
Entity repository: one interface over the remote and local backing stores.

Key patterns:
1. RemoteRepository talks to the SQL store through SQLAlchemy async sessions
2. LocalRepository keeps the same entities in the on-device key-value store
3. FallbackRepository tries the remote store first and, for that single
   call, falls back to the local store when the remote call fails

Every per-user query is scoped by owner id. The system instruction and the
usage counters are the only process-wide values. Transcripts are saved with full-replace semantics
and no version token, so the last writer wins.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from pydantic import TypeAdapter
from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from edtech.db import models
from edtech.schemas.admin import StatKeyType, UsageStats
from edtech.schemas.chat import Message
from edtech.schemas.documents import DocumentRecord
from edtech.schemas.events import ScheduleEvent
from edtech.schemas.user import UserProfile
from edtech.services.local_store import LocalStore
from edtech.services.sessions import decode_access_token

logger = logging.getLogger(__name__)

# Local key layout; must stay stable across versions
USERS_KEY = "edtech_users_v5"
STATS_KEY = "edtech_stats_v5"
PROMPT_KEY = "edtech_prompt_v5"
DOCS_PREFIX = "edtech_docs_v5_"
EVENTS_PREFIX = "edtech_events_v5_"
CHAT_PREFIX = "edtech_chat_v5_"

SYSTEM_INSTRUCTION_KEY = "system_instruction"

# Errors that send a single call to the local store
_REMOTE_ERRORS = (SQLAlchemyError, OSError)

_documents = TypeAdapter(list[DocumentRecord])
_events = TypeAdapter(list[ScheduleEvent])
_messages = TypeAdapter(list[Message])


def _aware(value: datetime) -> datetime:
    """Some drivers hand back naive timestamps; they are stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class EntityRepository(ABC):
    """CRUD contract shared by every backing store."""

    @abstractmethod
    async def get_profile(self, session_token: str | None) -> UserProfile | None:
        """Resolve the profile behind a session token; None if the token is invalid."""

    @abstractmethod
    async def save_profile(self, profile: UserProfile) -> None: ...

    @abstractmethod
    async def list_profiles(self) -> list[UserProfile]:
        """Every stored profile, oldest first."""

    @abstractmethod
    async def delete_profile(self, user_id: UUID) -> bool: ...

    @abstractmethod
    async def list_documents(self, owner_id: UUID) -> list[DocumentRecord]: ...

    @abstractmethod
    async def save_document(self, document: DocumentRecord) -> None: ...

    @abstractmethod
    async def delete_document(self, owner_id: UUID, document_id: UUID) -> bool: ...

    @abstractmethod
    async def list_events(self, owner_id: UUID) -> list[ScheduleEvent]: ...

    @abstractmethod
    async def save_event(self, event: ScheduleEvent) -> None: ...

    @abstractmethod
    async def delete_event(self, owner_id: UUID, event_id: UUID) -> bool: ...

    @abstractmethod
    async def get_transcript(self, owner_id: UUID) -> list[Message]: ...

    @abstractmethod
    async def save_transcript(self, owner_id: UUID, messages: list[Message]) -> None:
        """Replace the owner's whole transcript with `messages`."""

    @abstractmethod
    async def get_system_instruction(self) -> str:
        """Stored system instruction, or an empty string when none is stored."""

    @abstractmethod
    async def set_system_instruction(self, text: str) -> None:
        """Store the system instruction. Role checks are the caller's job."""

    @abstractmethod
    async def get_stats(self) -> UsageStats: ...

    @abstractmethod
    async def increment_stat(self, key: StatKeyType) -> None: ...


# =============================================================================
# LOCAL STORE
# =============================================================================


class LocalRepository(EntityRepository):
    """Entities kept in the on-device key-value store under `<prefix><ownerId>` keys."""

    def __init__(self, store: LocalStore):
        self.store = store

    def _read(self, key: str, adapter: TypeAdapter) -> list[Any]:
        return adapter.validate_python(self.store.get(key, []))

    def _write(self, key: str, adapter: TypeAdapter, items: list[Any]) -> None:
        self.store.set(key, adapter.dump_python(items, mode="json"))

    def _profiles(self) -> dict[str, Any]:
        return dict(self.store.get(USERS_KEY, {}))

    async def get_profile(self, session_token: str | None) -> UserProfile | None:
        user_id = decode_access_token(session_token)
        if user_id is None:
            return None
        raw = self._profiles().get(str(user_id))
        if raw:
            return UserProfile.model_validate(raw)
        return UserProfile.default_for(user_id)

    async def save_profile(self, profile: UserProfile) -> None:
        profiles = self._profiles()
        profiles[str(profile.id)] = profile.model_dump(mode="json")
        self.store.set(USERS_KEY, profiles)

    async def list_profiles(self) -> list[UserProfile]:
        profiles = [UserProfile.model_validate(raw) for raw in self._profiles().values()]
        return sorted(profiles, key=lambda p: p.joined_at)

    async def delete_profile(self, user_id: UUID) -> bool:
        profiles = self._profiles()
        if profiles.pop(str(user_id), None) is None:
            return False
        self.store.set(USERS_KEY, profiles)
        return True

    async def list_documents(self, owner_id: UUID) -> list[DocumentRecord]:
        docs = self._read(f"{DOCS_PREFIX}{owner_id}", _documents)
        return [d for d in docs if d.owner_id == owner_id]

    async def save_document(self, document: DocumentRecord) -> None:
        key = f"{DOCS_PREFIX}{document.owner_id}"
        docs = [d for d in self._read(key, _documents) if d.id != document.id]
        docs.append(document)
        self._write(key, _documents, docs)

    async def delete_document(self, owner_id: UUID, document_id: UUID) -> bool:
        key = f"{DOCS_PREFIX}{owner_id}"
        docs = self._read(key, _documents)
        kept = [d for d in docs if d.id != document_id]
        self._write(key, _documents, kept)
        return len(kept) != len(docs)

    async def list_events(self, owner_id: UUID) -> list[ScheduleEvent]:
        events = self._read(f"{EVENTS_PREFIX}{owner_id}", _events)
        return [e for e in events if e.owner_id == owner_id]

    async def save_event(self, event: ScheduleEvent) -> None:
        key = f"{EVENTS_PREFIX}{event.owner_id}"
        events = [e for e in self._read(key, _events) if e.id != event.id]
        events.append(event)
        self._write(key, _events, events)

    async def delete_event(self, owner_id: UUID, event_id: UUID) -> bool:
        key = f"{EVENTS_PREFIX}{owner_id}"
        events = self._read(key, _events)
        kept = [e for e in events if e.id != event_id]
        self._write(key, _events, kept)
        return len(kept) != len(events)

    async def get_transcript(self, owner_id: UUID) -> list[Message]:
        return self._read(f"{CHAT_PREFIX}{owner_id}", _messages)

    async def save_transcript(self, owner_id: UUID, messages: list[Message]) -> None:
        self._write(f"{CHAT_PREFIX}{owner_id}", _messages, list(messages))

    async def get_system_instruction(self) -> str:
        return self.store.get(PROMPT_KEY) or ""

    async def set_system_instruction(self, text: str) -> None:
        self.store.set(PROMPT_KEY, text)

    async def get_stats(self) -> UsageStats:
        return UsageStats.model_validate(self.store.get(STATS_KEY, {}))

    async def increment_stat(self, key: StatKeyType) -> None:
        stats = await self.get_stats()
        setattr(stats, key, getattr(stats, key) + 1)
        self.store.set(STATS_KEY, stats.model_dump())


# =============================================================================
# REMOTE STORE
# =============================================================================


class RemoteRepository(EntityRepository):
    """
    Entities in the SQL store. Each call opens its own session, so a
    failure in one call leaves nothing half-open for the next.
    """

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]):
        self.sessionmaker = sessionmaker

    async def get_profile(self, session_token: str | None) -> UserProfile | None:
        user_id = decode_access_token(session_token)
        if user_id is None:
            return None
        async with self.sessionmaker() as db:
            result = await db.execute(select(models.User).where(models.User.id == user_id))
            user = result.scalar_one_or_none()
        if user is None:
            return UserProfile.default_for(user_id)
        return self._to_profile(user)

    @staticmethod
    def _to_profile(user: models.User) -> UserProfile:
        return UserProfile(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            plan=user.plan,
            joined_at=_aware(user.created_at),
        )

    async def save_profile(self, profile: UserProfile) -> None:
        async with self.sessionmaker() as db:
            await db.merge(
                models.User(
                    id=profile.id,
                    name=profile.name,
                    email=profile.email,
                    role=profile.role,
                    plan=profile.plan,
                    created_at=profile.joined_at,
                )
            )
            await db.commit()

    async def list_profiles(self) -> list[UserProfile]:
        async with self.sessionmaker() as db:
            result = await db.execute(select(models.User).order_by(models.User.created_at.asc()))
            users = result.scalars().all()
        return [self._to_profile(user) for user in users]

    async def delete_profile(self, user_id: UUID) -> bool:
        async with self.sessionmaker() as db:
            result = await db.execute(delete(models.User).where(models.User.id == user_id))
            await db.commit()
        return result.rowcount > 0

    async def list_documents(self, owner_id: UUID) -> list[DocumentRecord]:
        stmt = (
            select(models.Document)
            .where(models.Document.owner_id == owner_id)
            .order_by(models.Document.created_at.asc())
        )
        async with self.sessionmaker() as db:
            result = await db.execute(stmt)
            rows = result.scalars().all()
        return [
            DocumentRecord(
                id=row.id,
                owner_id=row.owner_id,
                name=row.name,
                kind=row.kind,
                content=row.content,
                size_bytes=row.size_bytes,
                created_at=_aware(row.created_at),
            )
            for row in rows
        ]

    async def save_document(self, document: DocumentRecord) -> None:
        async with self.sessionmaker() as db:
            await db.merge(models.Document(**document.model_dump()))
            await db.commit()

    async def delete_document(self, owner_id: UUID, document_id: UUID) -> bool:
        stmt = delete(models.Document).where(
            models.Document.id == document_id, models.Document.owner_id == owner_id
        )
        async with self.sessionmaker() as db:
            result = await db.execute(stmt)
            await db.commit()
        return result.rowcount > 0

    async def list_events(self, owner_id: UUID) -> list[ScheduleEvent]:
        stmt = (
            select(models.ScheduleEvent)
            .where(models.ScheduleEvent.owner_id == owner_id)
            .order_by(models.ScheduleEvent.date.asc(), models.ScheduleEvent.created_at.asc())
        )
        async with self.sessionmaker() as db:
            result = await db.execute(stmt)
            rows = result.scalars().all()
        return [
            ScheduleEvent(
                id=row.id,
                owner_id=row.owner_id,
                title=row.title,
                date=row.date,
                category=row.category,
                created_at=_aware(row.created_at),
            )
            for row in rows
        ]

    async def save_event(self, event: ScheduleEvent) -> None:
        async with self.sessionmaker() as db:
            await db.merge(models.ScheduleEvent(**event.model_dump()))
            await db.commit()

    async def delete_event(self, owner_id: UUID, event_id: UUID) -> bool:
        stmt = delete(models.ScheduleEvent).where(
            models.ScheduleEvent.id == event_id, models.ScheduleEvent.owner_id == owner_id
        )
        async with self.sessionmaker() as db:
            result = await db.execute(stmt)
            await db.commit()
        return result.rowcount > 0

    async def get_transcript(self, owner_id: UUID) -> list[Message]:
        stmt = (
            select(models.ChatMessage)
            .where(models.ChatMessage.owner_id == owner_id)
            .order_by(models.ChatMessage.position.asc())
        )
        async with self.sessionmaker() as db:
            result = await db.execute(stmt)
            rows = result.scalars().all()
        return [
            Message(
                id=row.id,
                role=row.role,
                text=row.text,
                created_at=_aware(row.created_at),
                is_error=row.is_error,
                format=row.format,
                suggestions=row.suggestions or [],
            )
            for row in rows
        ]

    async def save_transcript(self, owner_id: UUID, messages: list[Message]) -> None:
        async with self.sessionmaker() as db:
            async with db.begin():
                await db.execute(
                    delete(models.ChatMessage).where(models.ChatMessage.owner_id == owner_id)
                )
                db.add_all(
                    models.ChatMessage(
                        id=message.id,
                        owner_id=owner_id,
                        position=position,
                        role=message.role,
                        text=message.text,
                        is_error=message.is_error,
                        format=message.format,
                        suggestions=[s.model_dump(mode="json") for s in message.suggestions],
                        created_at=message.created_at,
                    )
                    for position, message in enumerate(messages)
                )

    async def get_system_instruction(self) -> str:
        async with self.sessionmaker() as db:
            setting = await db.get(models.SystemSetting, SYSTEM_INSTRUCTION_KEY)
        return setting.value if setting else ""

    async def set_system_instruction(self, text: str) -> None:
        async with self.sessionmaker() as db:
            await db.merge(models.SystemSetting(key=SYSTEM_INSTRUCTION_KEY, value=text))
            await db.commit()

    async def get_stats(self) -> UsageStats:
        async with self.sessionmaker() as db:
            result = await db.execute(select(models.UsageStat))
            counts = {row.key: row.count for row in result.scalars().all()}
        return UsageStats(docs=counts.get("docs", 0), queries=counts.get("queries", 0))

    async def increment_stat(self, key: StatKeyType) -> None:
        stmt = (
            update(models.UsageStat)
            .where(models.UsageStat.key == key)
            .values(count=models.UsageStat.count + 1)
        )
        async with self.sessionmaker() as db:
            result = await db.execute(stmt)
            if result.rowcount == 0:
                db.add(models.UsageStat(key=key, count=1))
            await db.commit()


# =============================================================================
# PER-CALL FALLBACK
# =============================================================================


class FallbackRepository(EntityRepository):
    """
    Remote-first repository that degrades to the local store one call at a time.

    A missing table or a permission error only disables the calls that hit
    it; everything else keeps using the remote store. Callers never see the
    remote failure. Writes that fail remotely land in the local store so
    they are not lost.
    """

    def __init__(self, remote: EntityRepository, local: EntityRepository):
        self.remote = remote
        self.local = local

    async def _call(self, operation: str, *args: Any) -> Any:
        try:
            return await getattr(self.remote, operation)(*args)
        except _REMOTE_ERRORS as e:
            logger.warning("Remote %s failed, using local store: %s", operation, e)
            return await getattr(self.local, operation)(*args)

    async def get_profile(self, session_token: str | None) -> UserProfile | None:
        return await self._call("get_profile", session_token)

    async def save_profile(self, profile: UserProfile) -> None:
        await self._call("save_profile", profile)

    async def list_profiles(self) -> list[UserProfile]:
        return await self._call("list_profiles")

    async def delete_profile(self, user_id: UUID) -> bool:
        return await self._call("delete_profile", user_id)

    async def list_documents(self, owner_id: UUID) -> list[DocumentRecord]:
        return await self._call("list_documents", owner_id)

    async def save_document(self, document: DocumentRecord) -> None:
        await self._call("save_document", document)

    async def delete_document(self, owner_id: UUID, document_id: UUID) -> bool:
        return await self._call("delete_document", owner_id, document_id)

    async def list_events(self, owner_id: UUID) -> list[ScheduleEvent]:
        return await self._call("list_events", owner_id)

    async def save_event(self, event: ScheduleEvent) -> None:
        await self._call("save_event", event)

    async def delete_event(self, owner_id: UUID, event_id: UUID) -> bool:
        return await self._call("delete_event", owner_id, event_id)

    async def get_transcript(self, owner_id: UUID) -> list[Message]:
        return await self._call("get_transcript", owner_id)

    async def save_transcript(self, owner_id: UUID, messages: list[Message]) -> None:
        await self._call("save_transcript", owner_id, messages)

    async def get_system_instruction(self) -> str:
        return await self._call("get_system_instruction")

    async def set_system_instruction(self, text: str) -> None:
        await self._call("set_system_instruction", text)

    async def get_stats(self) -> UsageStats:
        return await self._call("get_stats")

    async def increment_stat(self, key: StatKeyType) -> None:
        await self._call("increment_stat", key)
