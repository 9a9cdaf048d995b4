"""Shared enums for models."""

from enum import Enum


class Role(str, Enum):
    """Authorization role carried by a profile."""

    HOME_OWNER = "home_owner"
    ARTISAN = "artisan"
    ADMIN = "admin"
    STAFF = "staff"
    ESTATE_MANAGER = "estate_manager"
    TENANT = "tenant"


class ProfileStatus(str, Enum):
    """Lifecycle status of a profile. Profiles are soft-disabled, never deleted."""

    PENDING = "pending"
    APPROVED = "approved"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    INACTIVE = "inactive"


# Statuses that count as approved for access checks
APPROVED_STATUSES = frozenset({ProfileStatus.APPROVED, ProfileStatus.ACTIVE})


class ApplicationKind(str, Enum):
    """Kind of promotion application."""

    HOME_OWNER = "home_owner"
    ARTISAN = "artisan"


class ApplicationStatus(str, Enum):
    """Review status of an application.

    PROVISIONING marks an approval whose account has not been created yet.
    """

    PENDING = "pending"
    PROVISIONING = "provisioning"
    APPROVED = "approved"
    REJECTED = "rejected"


class NotificationCategory(str, Enum):
    """Dashboard sections that carry a pending-item count."""

    HOME_OWNER_APPLICATIONS = "home_owner_applications"
    ARTISAN_APPLICATIONS = "artisan_applications"
    PROPERTY_VERIFICATIONS = "property_verifications"
    MAINTENANCE_REQUESTS = "maintenance_requests"
    PAYMENTS = "payments"
    REPORTS = "reports"


# Human-readable labels stored alongside the role; never used for authorization
STAFF_DISPLAY_ROLE = "Staff Member"
ESTATE_MANAGER_DISPLAY_ROLE = "Estate Manager"

_ROLE_ALIASES: dict[str, Role] = {
    "homeowner": Role.HOME_OWNER,
    "agent": Role.HOME_OWNER,
    "estate": Role.ESTATE_MANAGER,
    "estatemanager": Role.ESTATE_MANAGER,
    "staff_member": Role.STAFF,
    "administrator": Role.ADMIN,
    "super_admin": Role.ADMIN,
}

_ROLE_BY_APPLICATION_KIND: dict[ApplicationKind, Role] = {
    ApplicationKind.HOME_OWNER: Role.HOME_OWNER,
    ApplicationKind.ARTISAN: Role.ARTISAN,
}


def parse_role(value: Role | str) -> Role:
    """Map any accepted spelling of a role to the canonical Role.

    Accepts enum members, canonical values, and a fixed alias table
    ("Home Owner", "estate-manager", "agent", ...). Raises ValueError otherwise.
    """
    if isinstance(value, Role):
        return value
    key = value.strip().lower().replace("-", "_").replace(" ", "_")
    try:
        return Role(key)
    except ValueError:
        pass
    if key in _ROLE_ALIASES:
        return _ROLE_ALIASES[key]
    raise ValueError(f"Unknown role: {value!r}")


def role_for_application_kind(kind: ApplicationKind) -> Role:
    """Role granted when an application of this kind is approved."""
    return _ROLE_BY_APPLICATION_KIND[kind]
