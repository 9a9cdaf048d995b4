"""Process-local session snapshot. Never persisted."""

from collections.abc import Iterable
from dataclasses import dataclass

from src.portal.models.enums import APPROVED_STATUSES, Role, parse_role
from src.portal.models.identity import Identity
from src.portal.models.profile import Profile


def _normalize_roles(roles: Iterable[Role | str]) -> set[Role]:
    normalized: set[Role] = set()
    for role in roles:
        try:
            normalized.add(parse_role(role))
        except ValueError:
            continue
    return normalized


@dataclass(frozen=True)
class Session:
    """Who is signed in and what their profile says, at one point in time."""

    identity: Identity | None = None
    profile: Profile | None = None
    loading: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    def has_role(self, allowed: Iterable[Role | str]) -> bool:
        """False without a profile, else whether the profile role is in `allowed`."""
        if self.profile is None:
            return False
        return self.profile.role in _normalize_roles(allowed)

    @property
    def is_verified(self) -> bool:
        return bool(self.profile.is_verified) if self.profile is not None else False

    @property
    def is_approved(self) -> bool:
        return self.profile is not None and self.profile.status in APPROVED_STATUSES


@dataclass(frozen=True)
class RoleCapabilities:
    """Role shortcuts used by dashboards to decide which sections to offer."""

    is_home_owner: bool
    is_artisan: bool
    is_admin: bool
    is_staff: bool
    is_estate_manager: bool
    is_tenant: bool
    is_admin_or_staff: bool
    can_manage_properties: bool
    can_verify_properties: bool
    can_manage_users: bool
    role: Role | None

    @classmethod
    def for_session(cls, session: Session) -> "RoleCapabilities":
        return cls(
            is_home_owner=session.has_role([Role.HOME_OWNER]),
            is_artisan=session.has_role([Role.ARTISAN]),
            is_admin=session.has_role([Role.ADMIN]),
            is_staff=session.has_role([Role.STAFF]),
            is_estate_manager=session.has_role([Role.ESTATE_MANAGER]),
            is_tenant=session.has_role([Role.TENANT]),
            is_admin_or_staff=session.has_role([Role.ADMIN, Role.STAFF]),
            can_manage_properties=session.has_role(
                [Role.ADMIN, Role.STAFF, Role.ESTATE_MANAGER]
            ),
            can_verify_properties=session.has_role([Role.ADMIN, Role.STAFF]),
            can_manage_users=session.has_role([Role.ADMIN]),
            role=session.profile.role if session.profile is not None else None,
        )
