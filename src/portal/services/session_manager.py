"""Session manager - tracks the current identity and its profile."""

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import Any
from uuid import UUID

from pydantic import ValidationError as SchemaValidationError

from src.portal.core.config import Settings, get_settings
from src.portal.core.errors import AuthenticationError, ProvisioningError, ValidationError
from src.portal.core.logging import get_logger
from src.portal.models import (
    Identity,
    Profile,
    ProfileStatus,
    Role,
    RoleCapabilities,
    Session,
    parse_role,
)
from src.portal.models.base import utc_now
from src.portal.providers import CredentialProvider, ProfileStore
from src.portal.schemas.profile import PROTECTED_PROFILE_FIELDS, ProfileUpdate

logger = get_logger(__name__)


def validate_profile_patch(partial: dict[str, Any]) -> dict[str, Any]:
    """Validate a partial profile update and return only the fields that were set.

    Raises ValidationError if it touches id, email or role, or fails schema checks.
    """
    protected = PROTECTED_PROFILE_FIELDS & partial.keys()
    if protected:
        raise ValidationError(f"Profile fields cannot be changed here: {sorted(protected)}")
    try:
        patch = ProfileUpdate.model_validate(partial)
    except SchemaValidationError as e:
        raise ValidationError(f"Invalid profile data: {e.errors()[0]['msg']}") from e
    return patch.model_dump(exclude_unset=True)


class SessionManager:
    """Owns the process-local Session.

    Identity-change notifications may complete out of order. Each one takes a
    new epoch; a profile fetch whose epoch is no longer current is discarded,
    so the session always reflects the most recently received identity.
    """

    def __init__(
        self,
        credentials: CredentialProvider,
        profiles: ProfileStore,
        settings: Settings | None = None,
    ):
        self.credentials = credentials
        self.profiles = profiles
        self.settings = settings or get_settings()
        self._identity: Identity | None = None
        self._profile: Profile | None = None
        self._loading = True
        self._epoch = 0
        self._ready = asyncio.Event()
        self._unsubscribe: Callable[[], None] | None = None

    # --- Lifecycle ---

    async def start(self) -> None:
        """Subscribe to identity changes and load the provider's current identity."""
        if self._unsubscribe is None:
            self._unsubscribe = self.credentials.on_identity_changed(self.on_identity_changed)
        await self.on_identity_changed(self.credentials.current_identity)

    def dispose(self) -> None:
        """Stop receiving identity-change notifications."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # --- State ---

    @property
    def session(self) -> Session:
        return Session(identity=self._identity, profile=self._profile, loading=self._loading)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def profile(self) -> Profile | None:
        return self._profile

    def has_role(self, allowed: Iterable[Role | str]) -> bool:
        return self.session.has_role(allowed)

    @property
    def is_verified(self) -> bool:
        return self.session.is_verified

    @property
    def is_approved(self) -> bool:
        return self.session.is_approved

    @property
    def capabilities(self) -> RoleCapabilities:
        return RoleCapabilities.for_session(self.session)

    async def wait_until_ready(self, timeout: float | None = None) -> Session:
        """Wait until no identity change is loading, then return the session."""
        async with asyncio.timeout(timeout):
            await self._ready.wait()
        return self.session

    def _next_epoch(self) -> int:
        self._epoch += 1
        return self._epoch

    def _apply(self, identity: Identity | None, profile: Profile | None) -> None:
        """Replace the session outright, invalidating any in-flight fetch."""
        self._next_epoch()
        self._identity = identity
        self._profile = profile
        self._loading = False
        self._ready.set()

    def _clear(self) -> None:
        self._apply(None, None)

    async def _call_provider[T](
        self,
        call: Awaitable[T],
        error_type: type[AuthenticationError] | type[ProvisioningError],
        action: str,
    ) -> T:
        """Await a credential-provider call under the configured timeout."""
        timeout = self.settings.credential_provider_timeout_seconds
        try:
            async with asyncio.timeout(timeout):
                return await call
        except TimeoutError as e:
            logger.error("Credential provider timed out", action=action, timeout=timeout)
            raise error_type(f"Credential provider timed out during {action}") from e

    # --- Identity changes ---

    async def on_identity_changed(self, identity: Identity | None) -> None:
        """Handle an identity-change notification from the credential provider."""
        epoch = self._next_epoch()
        self._identity = identity
        self._loading = True
        self._ready.clear()

        profile: Profile | None = None
        if identity is not None:
            try:
                profile = await self.profiles.get_profile(identity.id)
            except Exception as e:
                logger.error(
                    "Error loading profile", identity_id=str(identity.id), error=str(e)
                )
                profile = None

        if epoch != self._epoch:
            logger.debug(
                "Discarding stale profile fetch",
                identity_id=str(identity.id) if identity else None,
                epoch=epoch,
                current_epoch=self._epoch,
            )
            return

        self._profile = profile
        self._loading = False
        self._ready.set()

    async def restore(self, identity_id: UUID) -> Session:
        """Rebuild the session for a known identity id (e.g. from a session token)."""
        identity = await self._call_provider(
            self.credentials.get_identity(identity_id), AuthenticationError, "restore"
        )
        if identity is None:
            self._clear()
        else:
            await self.on_identity_changed(identity)
        return self.session

    # --- Sign in / up / out ---

    async def sign_in(self, email: str, password: str) -> tuple[Identity, Profile | None]:
        """Authenticate and load the profile.

        Raises AuthenticationError on bad credentials or provider timeout; the
        session is left unauthenticated on failure.
        """
        self._loading = True
        self._ready.clear()
        try:
            identity = await self._call_provider(
                self.credentials.sign_in(email, password), AuthenticationError, "sign-in"
            )
        except AuthenticationError:
            self._clear()
            raise
        except Exception as e:
            self._clear()
            logger.error("Sign-in failed", error=str(e))
            raise AuthenticationError("Sign-in failed") from e

        # The provider normally notifies us during sign_in; load directly if it did not
        if self._identity is None or self._identity.id != identity.id or self._loading:
            await self.on_identity_changed(identity)

        logger.info("Signed in", identity_id=str(identity.id))
        return identity, self._profile

    async def sign_up(
        self,
        email: str,
        password: str,
        display_name: str,
        role: Role | str,
        extra: dict[str, Any] | None = None,
    ) -> tuple[Identity, Profile]:
        """Register a new identity and write its profile.

        The profile starts `pending` and unverified unless `extra` overrides
        status or is_verified. Raises ValidationError for missing email or
        display name, ProvisioningError if the identity cannot be created.
        """
        email = (email or "").strip()
        display_name = (display_name or "").strip()
        if not email or not display_name:
            raise ValidationError("Email and display name are required")
        try:
            canonical_role = parse_role(role)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        fields = validate_profile_patch(extra or {})

        try:
            identity = await self._call_provider(
                self.credentials.create_identity(email, password),
                ProvisioningError,
                "identity creation",
            )
        except ProvisioningError:
            raise
        except Exception as e:
            logger.error("Identity creation failed", error=str(e))
            raise ProvisioningError(f"Identity creation failed: {e}") from e

        identity = await self._call_provider(
            self.credentials.update_display_name(identity, display_name),
            ProvisioningError,
            "display name update",
        )

        now = utc_now()
        profile_fields: dict[str, Any] = {
            "status": ProfileStatus.PENDING,
            "is_verified": False,
            "created_at": now,
            "updated_at": now,
        }
        profile_fields.update({k: v for k, v in fields.items() if v is not None})
        profile = Profile(
            id=identity.id,
            email=identity.email,
            display_name=display_name,
            role=canonical_role,
            **profile_fields,
        )
        profile = await self.profiles.set_profile(identity.id, profile)

        self._apply(identity, profile)
        logger.info(
            "Signed up",
            identity_id=str(identity.id),
            role=canonical_role.value,
            status=profile.status.value,
        )
        return identity, profile

    async def sign_out(self) -> None:
        """Sign out. The local session is cleared even if the provider call fails."""
        try:
            await self._call_provider(
                self.credentials.sign_out(), AuthenticationError, "sign-out"
            )
        except Exception as e:
            logger.warning("Provider sign-out failed; clearing local session", error=str(e))
        finally:
            self._clear()

    # --- Profile ---

    async def refresh_profile(self) -> Profile | None:
        """Re-fetch the profile for the current identity. No-op when signed out."""
        identity = self._identity
        if identity is None:
            return None
        epoch = self._epoch
        profile = await self.profiles.get_profile(identity.id)
        if epoch == self._epoch:
            self._profile = profile
        return self._profile

    async def update_profile(self, partial: dict[str, Any]) -> Profile:
        """Write a partial update to the signed-in user's profile.

        Raises AuthenticationError when signed out and ValidationError when the
        update touches id, email or role.
        """
        identity = self._identity
        if identity is None or self._profile is None:
            raise AuthenticationError("No authenticated user")
        changes = validate_profile_patch(partial)

        epoch = self._epoch
        profile = await self.profiles.update_profile(identity.id, changes)
        if epoch == self._epoch:
            self._profile = profile
        return profile
