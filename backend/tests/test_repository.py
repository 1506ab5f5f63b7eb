"""Tests for the local, remote and fallback repositories."""

import datetime as dt
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from edtech.db import models
from edtech.schemas.admin import UsageStats
from edtech.schemas.chat import Message, Suggestion
from edtech.schemas.documents import DocumentRecord
from edtech.schemas.events import ScheduleEvent
from edtech.schemas.user import UserProfile
from edtech.services.local_store import LocalStore
from edtech.services.repository import (
    CHAT_PREFIX,
    FallbackRepository,
    LocalRepository,
    RemoteRepository,
)
from edtech.services.sessions import create_access_token


def make_transcript() -> list[Message]:
    return [
        Message(role="user", text="Plan a lesson on fractions"),
        Message(
            role="assistant",
            text="# Fractions\n\n1. Engage ",
            format="report",
            suggestions=[Suggestion(label="Generate a quiz from this", action="quiz")],
        ),
        Message(role="user", text="Shorter please"),
        Message(role="assistant", text="Sorry, something went wrong.", is_error=True),
    ]


@pytest.fixture(params=["local", "remote"])
def repository(request, local_repository, remote_repository):
    if request.param == "local":
        return local_repository
    return remote_repository


# =============================================================================
# SHARED CONTRACT
# =============================================================================


async def test_transcript_round_trip(repository):
    """Saved transcripts read back in order with identical content."""
    owner_id = uuid4()
    transcript = make_transcript()
    await repository.save_transcript(owner_id, transcript)

    loaded = await repository.get_transcript(owner_id)

    assert [m.id for m in loaded] == [m.id for m in transcript]
    assert [m.text for m in loaded] == [m.text for m in transcript]
    assert [m.role for m in loaded] == [m.role for m in transcript]
    assert [m.is_error for m in loaded] == [False, False, False, True]
    assert loaded[1].format == "report"
    assert loaded[1].suggestions == transcript[1].suggestions


async def test_transcript_save_replaces(repository):
    owner_id = uuid4()
    await repository.save_transcript(owner_id, make_transcript())
    replacement = [Message(role="user", text="Start over")]
    await repository.save_transcript(owner_id, replacement)

    loaded = await repository.get_transcript(owner_id)
    assert [m.text for m in loaded] == ["Start over"]


async def test_transcripts_scoped_by_owner(repository):
    alice, bob = uuid4(), uuid4()
    await repository.save_transcript(alice, make_transcript())

    assert await repository.get_transcript(bob) == []


async def test_documents_scoped_by_owner(repository):
    alice, bob = uuid4(), uuid4()
    document = DocumentRecord(owner_id=alice, name="a.txt", kind="txt", content="A", size_bytes=1)
    await repository.save_document(document)

    assert [d.id for d in await repository.list_documents(alice)] == [document.id]
    assert await repository.list_documents(bob) == []
    assert not await repository.delete_document(bob, document.id)
    assert await repository.delete_document(alice, document.id)
    assert await repository.list_documents(alice) == []


async def test_events_create_list_delete(repository):
    owner_id = uuid4()
    later = ScheduleEvent(owner_id=owner_id, title="Parent night", date=dt.date(2026, 11, 3))
    sooner = ScheduleEvent(
        owner_id=owner_id, title="Unit test", date=dt.date(2026, 10, 28), category="assessment"
    )
    await repository.save_event(later)
    await repository.save_event(sooner)

    events = await repository.list_events(owner_id)
    assert {e.title for e in events} == {"Parent night", "Unit test"}

    assert await repository.delete_event(owner_id, later.id)
    assert [e.id for e in await repository.list_events(owner_id)] == [sooner.id]
    assert not await repository.delete_event(owner_id, later.id)


async def test_system_instruction(repository):
    assert await repository.get_system_instruction() == ""
    await repository.set_system_instruction("Be brief.")
    assert await repository.get_system_instruction() == "Be brief."


async def test_profile_defaults_and_saves(repository):
    user_id = uuid4()
    token = create_access_token(user_id)

    profile = await repository.get_profile(token)
    assert profile.id == user_id
    assert (profile.role, profile.plan) == ("user", "free")

    await repository.save_profile(profile.model_copy(update={"plan": "pro", "name": "Mr. Okafor"}))
    saved = await repository.get_profile(token)
    assert saved.plan == "pro"
    assert saved.name == "Mr. Okafor"


async def test_invalid_token_has_no_profile(repository):
    assert await repository.get_profile(None) is None
    assert await repository.get_profile("not-a-token") is None


async def test_profiles_kept_per_user(repository):
    """Saving one user's profile leaves every other stored profile alone."""
    alice = UserProfile(id=uuid4(), name="Alice")
    bob = UserProfile(id=uuid4(), name="Bob")
    await repository.save_profile(alice.model_copy(update={"plan": "pro"}))
    await repository.save_profile(bob.model_copy(update={"plan": "campus"}))

    assert (await repository.get_profile(create_access_token(alice.id))).plan == "pro"
    assert (await repository.get_profile(create_access_token(bob.id))).plan == "campus"
    assert {p.id for p in await repository.list_profiles()} == {alice.id, bob.id}


async def test_delete_profile(repository):
    profile = UserProfile(id=uuid4(), plan="pro")
    await repository.save_profile(profile)

    assert await repository.delete_profile(profile.id)
    assert not await repository.delete_profile(profile.id)
    assert await repository.list_profiles() == []
    restored = await repository.get_profile(create_access_token(profile.id))
    assert restored.plan == "free"


async def test_usage_stats(repository):
    assert await repository.get_stats() == UsageStats(docs=0, queries=0)

    await repository.increment_stat("docs")
    await repository.increment_stat("queries")
    await repository.increment_stat("queries")

    assert await repository.get_stats() == UsageStats(docs=1, queries=2)


# =============================================================================
# LOCAL STORE
# =============================================================================


async def test_local_store_persists_across_instances(tmp_path):
    path = tmp_path / "store.json"
    owner_id = uuid4()
    await LocalRepository(LocalStore(path)).save_transcript(owner_id, make_transcript())

    reopened = LocalRepository(LocalStore(path))
    assert len(await reopened.get_transcript(owner_id)) == 4
    assert f"{CHAT_PREFIX}{owner_id}" in path.read_text()


def test_unreadable_local_store_starts_empty(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{not json")
    assert LocalStore(path).get("anything") is None


# =============================================================================
# PER-CALL FALLBACK
# =============================================================================


async def test_missing_remote_table_falls_back_for_that_call(sessionmaker, remote_repository, local_repository):
    """Without the events table, events use the local store while transcripts stay remote."""
    async with sessionmaker() as db:
        conn = await db.connection()
        await conn.run_sync(models.ScheduleEvent.__table__.drop)
        await db.commit()

    repository = FallbackRepository(remote_repository, local_repository)
    owner_id = uuid4()

    assert await repository.list_events(owner_id) == []

    event = ScheduleEvent(owner_id=owner_id, title="Field trip", date=dt.date(2026, 12, 1))
    await repository.save_event(event)
    assert [e.id for e in await repository.list_events(owner_id)] == [event.id]
    assert [e.id for e in await local_repository.list_events(owner_id)] == [event.id]

    await repository.save_transcript(owner_id, make_transcript())
    assert len(await remote_repository.get_transcript(owner_id)) == 4
    assert await local_repository.get_transcript(owner_id) == []


async def test_unreachable_remote_degrades_to_default_profile(tmp_path, local_repository):
    # Empty database: no tables at all
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
    repository = FallbackRepository(RemoteRepository(async_sessionmaker(bind=engine)), local_repository)
    user_id = uuid4()
    try:
        profile = await repository.get_profile(create_access_token(user_id))
    finally:
        await engine.dispose()

    assert profile.id == user_id
    assert (profile.role, profile.plan) == ("user", "free")
