"""Schedule event routes. Events are created and deleted, never updated."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from edtech.api.deps import CurrentProfile, Repository
from edtech.schemas.events import ScheduleEvent, ScheduleEventCreate

router = APIRouter(prefix="/events", tags=["events"])


@router.get("/", response_model=list[ScheduleEvent])
async def list_events(
    profile: CurrentProfile,
    repository: Repository,
) -> list[ScheduleEvent]:
    """List the current user's events."""
    return await repository.list_events(profile.id)


@router.post("/", response_model=ScheduleEvent, status_code=status.HTTP_201_CREATED)
async def create_event(
    data: ScheduleEventCreate,
    profile: CurrentProfile,
    repository: Repository,
) -> ScheduleEvent:
    """Create a new event."""
    event = ScheduleEvent(owner_id=profile.id, **data.model_dump())
    await repository.save_event(event)
    return event


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event_id: UUID,
    profile: CurrentProfile,
    repository: Repository,
) -> None:
    """Delete an event."""
    deleted = await repository.delete_event(profile.id, event_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resource not found")
