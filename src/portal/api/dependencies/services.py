"""Service factory dependencies."""

from typing import Annotated

from fastapi import Depends, Request

from src.portal.api.dependencies.db import DBSession
from src.portal.api.dependencies.repositories import (
    ApplicationRepo,
    CredentialRepo,
    ProfileRepo,
)
from src.portal.providers import SQLCredentialProvider
from src.portal.services import (
    NotificationService,
    PromotionService,
    ReviewLocks,
    SessionManager,
)


def get_credential_provider(
    credential_repo: CredentialRepo, session: DBSession
) -> SQLCredentialProvider:
    """Get a credential provider bound to the request's database session."""
    return SQLCredentialProvider(credential_repo, session)


CredentialProviderDep = Annotated[SQLCredentialProvider, Depends(get_credential_provider)]


def get_session_manager(
    credentials: CredentialProviderDep, profile_repo: ProfileRepo
) -> SessionManager:
    """Get a session manager. Each request rebuilds its own session."""
    return SessionManager(credentials, profile_repo)


def get_review_locks(request: Request) -> ReviewLocks:
    """Process-wide review locks, created at startup."""
    locks: ReviewLocks | None = getattr(request.app.state, "review_locks", None)
    if locks is None:
        locks = ReviewLocks()
        request.app.state.review_locks = locks
    return locks


def get_promotion_service(
    request: Request,
    credentials: CredentialProviderDep,
    profile_repo: ProfileRepo,
    application_repo: ApplicationRepo,
) -> PromotionService:
    return PromotionService(
        credentials,
        profile_repo,
        application_repo,
        review_locks=get_review_locks(request),
    )


def get_notification_service(application_repo: ApplicationRepo) -> NotificationService:
    return NotificationService(application_repo)


SessionManagerDep = Annotated[SessionManager, Depends(get_session_manager)]
PromotionServiceDep = Annotated[PromotionService, Depends(get_promotion_service)]
NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]
