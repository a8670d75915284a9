"""Caller profile endpoint."""

from fastapi import APIRouter

from ams.api.dependencies import InstanceServiceDep, UserIdDep
from ams.api.models.agents import ProfileResponse

router = APIRouter()


@router.get("/me", response_model=ProfileResponse)
async def get_profile(service: InstanceServiceDep, user_id: UserIdDep) -> ProfileResponse:
    """Return the caller's profile, or ``{"profile": null}`` if none exists."""
    return ProfileResponse(profile=await service.get_profile(user_id))
