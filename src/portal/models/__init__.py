"""Model exports.

Import from here: `from src.portal.models import Profile, Role`
"""

from src.portal.models.application import Application
from src.portal.models.enums import (
    APPROVED_STATUSES,
    ESTATE_MANAGER_DISPLAY_ROLE,
    STAFF_DISPLAY_ROLE,
    ApplicationKind,
    ApplicationStatus,
    NotificationCategory,
    ProfileStatus,
    Role,
    parse_role,
    role_for_application_kind,
)
from src.portal.models.identity import CredentialRecord, Identity
from src.portal.models.profile import Profile
from src.portal.models.session import RoleCapabilities, Session

__all__ = [
    # Enums
    "APPROVED_STATUSES",
    "ESTATE_MANAGER_DISPLAY_ROLE",
    "STAFF_DISPLAY_ROLE",
    "ApplicationKind",
    "ApplicationStatus",
    "NotificationCategory",
    "ProfileStatus",
    "Role",
    "parse_role",
    "role_for_application_kind",
    # Models
    "Application",
    "CredentialRecord",
    "Identity",
    "Profile",
    # Session
    "RoleCapabilities",
    "Session",
]
