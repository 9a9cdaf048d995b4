"""Promotion service - turns reviewed applications into live accounts."""

import asyncio
from collections.abc import AsyncIterator, Awaitable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from src.portal.core.config import Settings, get_settings
from src.portal.core.errors import (
    ConflictError,
    NotFoundError,
    NotificationError,
    ProvisioningError,
    ValidationError,
)
from src.portal.core.logging import get_logger
from src.portal.core.security import generate_temporary_secret
from src.portal.models import (
    ESTATE_MANAGER_DISPLAY_ROLE,
    STAFF_DISPLAY_ROLE,
    Application,
    ApplicationKind,
    ApplicationStatus,
    Identity,
    Profile,
    ProfileStatus,
    Role,
    parse_role,
    role_for_application_kind,
)
from src.portal.models.base import utc_now
from src.portal.providers import ApplicationStore, CredentialProvider, ProfileStore
from src.portal.schemas.admin import EstateUserCreate, StaffUserCreate

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProvisionResult:
    identity: Identity
    profile: Profile
    email_sent: bool


@dataclass(frozen=True)
class ReviewResult:
    application_id: UUID
    status: ApplicationStatus
    identity: Identity | None = None
    profile: Profile | None = None
    email_sent: bool = False


def _text(fields: dict[str, Any], key: str) -> str | None:
    value = fields.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _int(fields: dict[str, Any], key: str) -> int | None:
    try:
        return int(fields[key])
    except (KeyError, TypeError, ValueError):
        return None


def profile_fields_from_application(application: Application) -> dict[str, Any]:
    """Role-specific profile fields copied from an application's submitted fields."""
    fields = application.submitted_fields
    copied: dict[str, Any] = {
        "phone": _text(fields, "phone"),
        "location": _text(fields, "location"),
        "bio": _text(fields, "about") or _text(fields, "bio"),
        "region": _text(fields, "region"),
        "profile_image": _text(fields, "profileImageUrl") or _text(fields, "profile_image"),
        "id_image_url": _text(fields, "idImageUrl") or _text(fields, "id_image_url"),
    }
    if application.kind == ApplicationKind.HOME_OWNER:
        copied.update(
            company=_text(fields, "company"),
            years_of_experience=_int(fields, "experience"),
            id_type=_text(fields, "id_type") or _text(fields, "idType"),
            id_number=_text(fields, "id_number") or _text(fields, "idNumber"),
        )
    else:
        skills = fields.get("skills") or []
        copied["skills"] = [str(s) for s in skills] if isinstance(skills, list) else []
    return copied


class ReviewLocks:
    """Per-application locks, shared by every PromotionService in the process.

    A lock is dropped once nobody holds or waits for it.
    """

    def __init__(self) -> None:
        self._locks: dict[UUID, asyncio.Lock] = {}
        self._users: dict[UUID, int] = {}

    def __contains__(self, application_id: UUID) -> bool:
        return application_id in self._locks

    @asynccontextmanager
    async def hold(self, application_id: UUID) -> AsyncIterator[None]:
        lock = self._locks.setdefault(application_id, asyncio.Lock())
        self._users[application_id] = self._users.get(application_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[application_id] -= 1
            if not self._users[application_id]:
                del self._users[application_id]
                del self._locks[application_id]


class PromotionService:
    """Administrative account provisioning.

    Approval marks the application `provisioning` before any account exists
    and `approved` only after the profile is written. A failure in between
    leaves it in `provisioning` so an operator can find and repair it.
    """

    def __init__(
        self,
        credentials: CredentialProvider,
        profiles: ProfileStore,
        applications: ApplicationStore,
        settings: Settings | None = None,
        review_locks: "ReviewLocks | None" = None,
    ):
        self.credentials = credentials
        self.profiles = profiles
        self.applications = applications
        self.settings = settings or get_settings()
        self.review_locks = review_locks or ReviewLocks()

    async def _provider_call[T](self, call: Awaitable[T], action: str) -> T:
        timeout = self.settings.credential_provider_timeout_seconds
        try:
            async with asyncio.timeout(timeout):
                return await call
        except TimeoutError as e:
            logger.error("Credential provider timed out", action=action, timeout=timeout)
            raise ProvisioningError(f"Credential provider timed out during {action}") from e

    async def _send_reset(self, email: str, identity_id: UUID) -> bool:
        """Best-effort credential-reset delivery. Never raises."""
        try:
            await self._provider_call(
                self.credentials.send_credential_reset(email), "credential reset"
            )
        except (NotificationError, ProvisioningError) as e:
            logger.warning(
                "Credential reset delivery failed",
                identity_id=str(identity_id),
                error=e.message,
            )
            return False
        except Exception as e:
            logger.exception(
                "Credential reset delivery failed unexpectedly",
                identity_id=str(identity_id),
                error=str(e),
            )
            return False
        return True

    async def _provision(
        self,
        email: str,
        name: str,
        role: Role,
        profile_fields: dict[str, Any],
        created_by: UUID | None,
    ) -> ProvisionResult:
        """Create an identity with a generated secret, write its profile, send the reset.

        Raises ProvisioningError if the identity cannot be created.
        """
        # The temporary secret never leaves this frame
        identity = await self._provider_call(
            self.credentials.create_identity(email, generate_temporary_secret()),
            "identity creation",
        )
        identity = await self._provider_call(
            self.credentials.update_display_name(identity, name), "display name update"
        )

        now = utc_now()
        profile = Profile(
            id=identity.id,
            email=identity.email,
            display_name=name,
            role=role,
            created_by=created_by,
            created_at=now,
            updated_at=now,
            **{k: v for k, v in profile_fields.items() if v is not None},
        )
        profile = await self.profiles.set_profile(identity.id, profile)
        logger.info(
            "Account provisioned",
            identity_id=str(identity.id),
            role=role.value,
            status=profile.status.value,
        )

        email_sent = await self._send_reset(identity.email, identity.id)
        return ProvisionResult(identity=identity, profile=profile, email_sent=email_sent)

    async def review_application(
        self,
        kind: ApplicationKind | str,
        application_id: UUID,
        status: ApplicationStatus | str,
        reviewer_id: UUID,
        notes: str | None = None,
    ) -> ReviewResult:
        """Approve or reject a pending application.

        Args:
            kind: Application kind; must match the stored application
            application_id: Application to review
            status: "approved" or "rejected"
            reviewer_id: Identity id of the reviewing administrator
            notes: Optional review notes

        Returns:
            ReviewResult, with the new identity and profile on approval

        Raises:
            NotFoundError: Application absent (or of another kind)
            ConflictError: Application is no longer pending
            ValidationError: Bad decision, or approved application lacks email/name
                (then also naming the application by `inconsistent_application_id`)
            ProvisioningError: Account creation failed; the application is left
                in `provisioning` and named by `inconsistent_application_id`
        """
        try:
            kind = ApplicationKind(kind)
            status = ApplicationStatus(status)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if status not in (ApplicationStatus.APPROVED, ApplicationStatus.REJECTED):
            raise ValidationError("Review decision must be 'approved' or 'rejected'")

        async with self.review_locks.hold(application_id):
            return await self._review(kind, application_id, status, reviewer_id, notes)

    async def _review(
        self,
        kind: ApplicationKind,
        application_id: UUID,
        status: ApplicationStatus,
        reviewer_id: UUID,
        notes: str | None,
    ) -> ReviewResult:
        application = await self.applications.get_application(application_id)
        if application is None or application.kind != kind:
            raise NotFoundError(f"Application {application_id} not found")
        if application.status != ApplicationStatus.PENDING:
            raise ConflictError(
                f"Application {application_id} is already {application.status.value}"
            )

        log = logger.bind(application_id=str(application_id), kind=kind.value)
        review_record = {
            "reviewed_by": reviewer_id,
            "review_notes": notes,
            "last_updated": utc_now(),
        }

        if status == ApplicationStatus.REJECTED:
            await self.applications.update_application(
                application_id, {"status": ApplicationStatus.REJECTED, **review_record}
            )
            log.info("Application rejected", reviewer_id=str(reviewer_id))
            return ReviewResult(application_id=application_id, status=ApplicationStatus.REJECTED)

        await self.applications.update_application(
            application_id, {"status": ApplicationStatus.PROVISIONING, **review_record}
        )

        email = application.applicant_email
        name = application.applicant_name
        if not email or not name:
            log.error("Approved application lacks email or name; left in provisioning")
            raise ValidationError(
                "Application is missing the applicant's email or name",
                inconsistent_application_id=application_id,
            )

        profile_fields = profile_fields_from_application(application)
        profile_fields.update(
            status=ProfileStatus.APPROVED,
            is_verified=True,
            verification_date=utc_now(),
        )
        try:
            result = await self._provision(
                email, name, role_for_application_kind(kind), profile_fields, reviewer_id
            )
        except ProvisioningError as e:
            log.error("Provisioning failed; application left in provisioning", error=e.message)
            raise ProvisioningError(
                e.message, inconsistent_application_id=application_id
            ) from e

        await self.applications.update_application(
            application_id,
            {"status": ApplicationStatus.APPROVED, "last_updated": utc_now()},
        )
        log.info(
            "Application approved",
            identity_id=str(result.identity.id),
            email_sent=result.email_sent,
        )
        return ReviewResult(
            application_id=application_id,
            status=ApplicationStatus.APPROVED,
            identity=result.identity,
            profile=result.profile,
            email_sent=result.email_sent,
        )

    async def add_staff_user(
        self, data: StaffUserCreate, created_by: UUID | None = None
    ) -> ProvisionResult:
        """Provision a staff account directly. `data.role` is only a display label."""
        return await self._provision(
            str(data.email),
            data.display_name.strip(),
            Role.STAFF,
            {
                "status": ProfileStatus.ACTIVE,
                "is_verified": True,
                "display_role": data.role or STAFF_DISPLAY_ROLE,
                "company": data.department,
                "skills": list(data.permissions),
                "phone": data.phone,
                "location": data.location,
                "bio": data.bio,
            },
            created_by,
        )

    async def add_estate_user(
        self, data: EstateUserCreate, created_by: UUID | None = None
    ) -> ProvisionResult:
        """Provision an estate-manager account directly."""
        return await self._provision(
            str(data.email),
            data.name.strip(),
            Role.ESTATE_MANAGER,
            {
                "status": ProfileStatus.ACTIVE,
                "is_verified": True,
                "display_role": ESTATE_MANAGER_DISPLAY_ROLE,
                "company": data.estate,
                "phone": data.phone,
                "location": data.location,
            },
            created_by,
        )

    # --- Administration ---

    async def list_applications(
        self, kind: ApplicationKind | str, status: ApplicationStatus | str | None = None
    ) -> list[Application]:
        return await self.applications.query_applications(kind=kind, status=status)

    async def list_users(self, role: Role | str | None = None) -> list[Profile]:
        if role is None:
            return await self.profiles.query_profiles()
        try:
            role = parse_role(role)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        return await self.profiles.query_profiles(role=role)

    async def update_user_status(self, user_id: UUID, status: ProfileStatus | str) -> Profile:
        """Set a profile's status. Raises NotFoundError if the profile is absent."""
        try:
            status = ProfileStatus(status)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        profile = await self.profiles.update_profile(user_id, {"status": status})
        logger.info("User status updated", user_id=str(user_id), status=status.value)
        return profile

    async def deactivate_user(self, user_id: UUID) -> Profile:
        """Soft-disable a user. Profiles are never deleted."""
        return await self.update_user_status(user_id, ProfileStatus.INACTIVE)

    async def change_role(self, user_id: UUID, role: Role | str) -> Profile:
        """Change a user's role. This is the only operation that mutates `role`."""
        try:
            role = parse_role(role)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        profile = await self.profiles.get_profile(user_id)
        if profile is None:
            raise NotFoundError(f"Profile {user_id} not found")
        previous = profile.role
        profile = await self.profiles.update_profile(user_id, {"role": role})
        logger.info(
            "User role changed",
            user_id=str(user_id),
            previous_role=previous.value,
            role=role.value,
        )
        return profile
