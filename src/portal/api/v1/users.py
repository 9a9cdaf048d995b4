"""Current-user profile endpoints."""

from fastapi import APIRouter

from src.portal.api.dependencies import AuthenticatedSession, RequestSessionManager
from src.portal.core.errors import NotFoundError
from src.portal.schemas import ProfileRead, SelfProfileUpdate

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "/me",
    response_model=ProfileRead,
    responses={
        401: {"description": "Not authenticated"},
        404: {"description": "No profile exists for this identity"},
    },
)
async def get_my_profile(session: AuthenticatedSession) -> ProfileRead:
    """Get the signed-in user's profile."""
    if session.profile is None:
        raise NotFoundError("Profile not found")
    return ProfileRead.model_validate(session.profile)


@router.patch(
    "/me",
    response_model=ProfileRead,
    responses={
        401: {"description": "Not authenticated"},
        422: {"description": "Validation error"},
    },
)
async def update_my_profile(
    data: SelfProfileUpdate,
    session: AuthenticatedSession,
    manager: RequestSessionManager,
) -> ProfileRead:
    """Update the signed-in user's own profile fields."""
    profile = await manager.update_profile(data.model_dump(exclude_unset=True, exclude_none=True))
    return ProfileRead.model_validate(profile)
