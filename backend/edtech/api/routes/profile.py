"""
Profile Routes

Endpoints:
- GET /me - Current user's profile
- POST /me/plan - Switch plan tier

Identity provisioning (sign-up, OAuth) lives outside this service; requests
arrive with a session JWT already issued.
"""

from fastapi import APIRouter

from edtech.api.deps import Controller, CurrentProfile
from edtech.schemas.user import PlanUpgradeRequest, UserProfile

router = APIRouter(prefix="/me", tags=["profile"])


@router.get("", response_model=UserProfile)
async def get_me(profile: CurrentProfile) -> UserProfile:
    """
    Get the current user's profile.

    A valid session whose stored profile cannot be read gets a default
    free-plan profile rather than an error.
    """
    return profile


@router.post("/plan", response_model=UserProfile)
async def change_plan(
    request: PlanUpgradeRequest,
    profile: CurrentProfile,
    controller: Controller,
) -> UserProfile:
    """Move the current user to another plan tier (payment is handled elsewhere)."""
    return await controller.upgrade_plan(profile, request.plan)
