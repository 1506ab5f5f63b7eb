"""Admin routes: the global system instruction, usage stats and user management."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from edtech.api.deps import Controller, CurrentProfile
from edtech.schemas.admin import (
    AdminStatsRead,
    SystemInstructionRead,
    SystemInstructionUpdate,
    UserListResponse,
)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/system-instruction", response_model=SystemInstructionRead)
async def get_system_instruction(
    profile: CurrentProfile,
    controller: Controller,
) -> SystemInstructionRead:
    """Read the system instruction every completion request starts from."""
    if not profile.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    text = await controller.system_instruction()
    return SystemInstructionRead(text=text, is_default=text == controller.default_system_instruction)


@router.put("/system-instruction", response_model=SystemInstructionRead)
async def update_system_instruction(
    request: SystemInstructionUpdate,
    profile: CurrentProfile,
    controller: Controller,
) -> SystemInstructionRead:
    """Replace the system instruction. Admin only."""
    await controller.set_system_instruction(profile, request.text)
    return SystemInstructionRead(text=request.text, is_default=False)


@router.get("/stats", response_model=AdminStatsRead)
async def get_usage_stats(
    profile: CurrentProfile,
    controller: Controller,
) -> AdminStatsRead:
    """Stored user count plus documents uploaded and chat turns started."""
    return await controller.usage_stats(profile)


@router.get("/users", response_model=UserListResponse)
async def list_users(
    profile: CurrentProfile,
    controller: Controller,
) -> UserListResponse:
    """List stored profiles. Admin only."""
    users = await controller.list_users(profile)
    return UserListResponse(users=users, total=len(users))


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: UUID,
    profile: CurrentProfile,
    controller: Controller,
) -> None:
    """Delete another user's profile. Admins cannot delete themselves."""
    await controller.delete_user(profile, user_id)
