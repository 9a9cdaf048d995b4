"""Administrative endpoints (admin role only)."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from src.portal.api.dependencies import AdminSession, PromotionServiceDep
from src.portal.core.errors import AuthenticationError
from src.portal.models import ApplicationKind, ApplicationStatus, Role, Session
from src.portal.schemas import (
    ApplicationRead,
    ApplicationReviewRequest,
    ApplicationReviewResponse,
    EstateUserCreate,
    ProfileRead,
    ProvisionResponse,
    StaffUserCreate,
    UserRoleUpdate,
    UserStatusUpdate,
)

router = APIRouter(prefix="/admin", tags=["admin"])

_GUARD_RESPONSES: dict[int | str, dict[str, str]] = {
    401: {"description": "Not authenticated"},
    403: {"description": "Admin role required"},
}


def _actor_id(session: Session) -> UUID:
    if session.identity is None:
        raise AuthenticationError("No authenticated user")
    return session.identity.id


@router.get(
    "/applications/{kind}",
    response_model=list[ApplicationRead],
    responses=_GUARD_RESPONSES,
)
async def list_applications(
    kind: ApplicationKind,
    session: AdminSession,
    service: PromotionServiceDep,
    application_status: Annotated[ApplicationStatus | None, Query(alias="status")] = None,
) -> list[ApplicationRead]:
    """List applications of a kind, newest first, optionally filtered by status."""
    applications = await service.list_applications(kind, application_status)
    return [ApplicationRead.model_validate(a) for a in applications]


@router.post(
    "/applications/{kind}/{application_id}/review",
    response_model=ApplicationReviewResponse,
    responses={
        **_GUARD_RESPONSES,
        404: {"description": "Application not found"},
        409: {"description": "Application is no longer pending"},
        422: {"description": "Application lacks the applicant's email or name"},
        502: {"description": "Account provisioning failed; application left in provisioning"},
    },
)
async def review_application(
    kind: ApplicationKind,
    application_id: UUID,
    data: ApplicationReviewRequest,
    session: AdminSession,
    service: PromotionServiceDep,
) -> ApplicationReviewResponse:
    """Approve or reject a pending application.

    Approval creates the applicant's account and emails them a link to set
    their password. `email_sent` is false if that email could not be sent.
    """
    result = await service.review_application(
        kind, application_id, data.status, _actor_id(session), data.notes
    )
    return ApplicationReviewResponse(
        application_id=result.application_id,
        status=result.status,
        profile=ProfileRead.model_validate(result.profile) if result.profile else None,
        email_sent=result.email_sent,
    )


@router.post(
    "/staff",
    response_model=ProvisionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_GUARD_RESPONSES, 502: {"description": "Account provisioning failed"}},
)
async def add_staff_user(
    data: StaffUserCreate, session: AdminSession, service: PromotionServiceDep
) -> ProvisionResponse:
    """Create a staff account."""
    result = await service.add_staff_user(data, created_by=_actor_id(session))
    return ProvisionResponse(
        profile=ProfileRead.model_validate(result.profile), email_sent=result.email_sent
    )


@router.post(
    "/estate-users",
    response_model=ProvisionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_GUARD_RESPONSES, 502: {"description": "Account provisioning failed"}},
)
async def add_estate_user(
    data: EstateUserCreate, session: AdminSession, service: PromotionServiceDep
) -> ProvisionResponse:
    """Create an estate-manager account."""
    result = await service.add_estate_user(data, created_by=_actor_id(session))
    return ProvisionResponse(
        profile=ProfileRead.model_validate(result.profile), email_sent=result.email_sent
    )


@router.get("/users", response_model=list[ProfileRead], responses=_GUARD_RESPONSES)
async def list_users(
    session: AdminSession,
    service: PromotionServiceDep,
    role: Role | None = None,
) -> list[ProfileRead]:
    profiles = await service.list_users(role)
    return [ProfileRead.model_validate(p) for p in profiles]


@router.patch(
    "/users/{user_id}/status",
    response_model=ProfileRead,
    responses={**_GUARD_RESPONSES, 404: {"description": "Profile not found"}},
)
async def update_user_status(
    user_id: UUID, data: UserStatusUpdate, session: AdminSession, service: PromotionServiceDep
) -> ProfileRead:
    """Set a user's status (e.g. suspend or reactivate)."""
    profile = await service.update_user_status(user_id, data.status)
    return ProfileRead.model_validate(profile)


@router.patch(
    "/users/{user_id}/role",
    response_model=ProfileRead,
    responses={**_GUARD_RESPONSES, 404: {"description": "Profile not found"}},
)
async def change_user_role(
    user_id: UUID, data: UserRoleUpdate, session: AdminSession, service: PromotionServiceDep
) -> ProfileRead:
    profile = await service.change_role(user_id, data.role)
    return ProfileRead.model_validate(profile)


@router.post(
    "/users/{user_id}/deactivate",
    response_model=ProfileRead,
    responses={**_GUARD_RESPONSES, 404: {"description": "Profile not found"}},
)
async def deactivate_user(
    user_id: UUID, session: AdminSession, service: PromotionServiceDep
) -> ProfileRead:
    """Soft-disable a user. Profiles are never deleted."""
    profile = await service.deactivate_user(user_id)
    return ProfileRead.model_validate(profile)
