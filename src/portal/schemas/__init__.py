from src.portal.schemas.admin import (
    ApplicationRead,
    ApplicationReviewRequest,
    ApplicationReviewResponse,
    EstateUserCreate,
    ProvisionResponse,
    StaffUserCreate,
    UserRoleUpdate,
    UserStatusUpdate,
)
from src.portal.schemas.auth import (
    CredentialResetConfirm,
    IdentityRead,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
)
from src.portal.schemas.notification import NotificationCountsRead
from src.portal.schemas.profile import (
    PROTECTED_PROFILE_FIELDS,
    ProfileRead,
    ProfileUpdate,
    SelfProfileUpdate,
)

__all__ = [
    # Admin
    "ApplicationRead",
    "ApplicationReviewRequest",
    "ApplicationReviewResponse",
    "EstateUserCreate",
    "ProvisionResponse",
    "StaffUserCreate",
    "UserRoleUpdate",
    "UserStatusUpdate",
    # Auth
    "CredentialResetConfirm",
    "IdentityRead",
    "SignInRequest",
    "SignInResponse",
    "SignUpRequest",
    # Notifications
    "NotificationCountsRead",
    # Profile
    "PROTECTED_PROFILE_FIELDS",
    "ProfileRead",
    "ProfileUpdate",
    "SelfProfileUpdate",
]
