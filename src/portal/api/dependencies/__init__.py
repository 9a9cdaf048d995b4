"""FastAPI dependency injection definitions."""

from src.portal.api.dependencies.auth import (
    AdminOrStaffSession,
    AdminSession,
    AuthenticatedSession,
    RequestSessionManager,
    get_request_session_manager,
    require_access,
)
from src.portal.api.dependencies.db import DBSession, get_db_session
from src.portal.api.dependencies.repositories import (
    ApplicationRepo,
    CredentialRepo,
    ProfileRepo,
    get_application_repository,
    get_credential_repository,
    get_profile_repository,
)
from src.portal.api.dependencies.services import (
    CredentialProviderDep,
    NotificationServiceDep,
    PromotionServiceDep,
    SessionManagerDep,
    get_credential_provider,
    get_notification_service,
    get_promotion_service,
    get_review_locks,
    get_session_manager,
)

__all__ = [
    # Database
    "DBSession",
    "get_db_session",
    # Auth
    "AdminOrStaffSession",
    "AdminSession",
    "AuthenticatedSession",
    "RequestSessionManager",
    "get_request_session_manager",
    "require_access",
    # Repositories
    "ApplicationRepo",
    "CredentialRepo",
    "ProfileRepo",
    "get_application_repository",
    "get_credential_repository",
    "get_profile_repository",
    # Services
    "CredentialProviderDep",
    "NotificationServiceDep",
    "PromotionServiceDep",
    "SessionManagerDep",
    "get_credential_provider",
    "get_notification_service",
    "get_promotion_service",
    "get_review_locks",
    "get_session_manager",
]
