"""Credential provider contract and the SQL-backed default implementation."""

import asyncio
import secrets
from collections.abc import Awaitable, Callable
from datetime import timedelta
from hashlib import sha256
from typing import Protocol
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.portal.core.config import get_settings
from src.portal.core.errors import AuthenticationError, NotificationError, ProvisioningError
from src.portal.core.logging import get_logger
from src.portal.core.notifications import send_credential_reset_email
from src.portal.core.security import DUMMY_PASSWORD_HASH, hash_password, verify_password
from src.portal.models import CredentialRecord, Identity
from src.portal.models.base import utc_now
from src.portal.repositories import CredentialRepository

logger = get_logger(__name__)

IdentityListener = Callable[[Identity | None], Awaitable[None]]


class CredentialProvider(Protocol):
    """Issues and validates identities and delivers credential-reset messages."""

    async def create_identity(self, email: str, secret: str) -> Identity: ...

    async def sign_in(self, email: str, secret: str) -> Identity: ...

    async def sign_out(self) -> None: ...

    async def update_display_name(self, identity: Identity, name: str) -> Identity: ...

    async def send_credential_reset(self, email: str) -> None: ...

    async def get_identity(self, identity_id: UUID) -> Identity | None: ...

    def on_identity_changed(self, listener: IdentityListener) -> Callable[[], None]: ...

    @property
    def current_identity(self) -> Identity | None: ...


def normalize_email(email: str) -> str:
    """Lowercase and strip an email to prevent case-sensitivity duplicates."""
    return email.lower().strip()


class IdentityChangeNotifier:
    """Listener registry shared by credential provider implementations.

    Listeners are awaited in registration order; a failing listener is logged
    and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        self._listeners: list[IdentityListener] = []
        self.current_identity: Identity | None = None

    def on_identity_changed(self, listener: IdentityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def set_current_identity(self, identity: Identity | None) -> None:
        self.current_identity = identity
        for listener in list(self._listeners):
            try:
                await listener(identity)
            except Exception as e:
                logger.error("Identity-change listener failed", error=str(e))


class SQLCredentialProvider(IdentityChangeNotifier):
    """Credential provider storing Argon2 hashes in the credentials table.

    Unlike hosted providers, creating an identity does not sign it in, so an
    administrator provisioning accounts keeps their own session.
    """

    def __init__(self, credential_repo: CredentialRepository, session: AsyncSession):
        super().__init__()
        self.credential_repo = credential_repo
        self.session = session

    async def create_identity(self, email: str, secret: str) -> Identity:
        """Create a new identity.

        Raises ProvisioningError if the email is already registered.
        """
        email = normalize_email(email)
        if await self.credential_repo.exists_by_email(email):
            raise ProvisioningError("Email already registered")

        record = CredentialRecord(email=email, hashed_password=hash_password(secret))
        self.credential_repo.add(record)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ProvisioningError("Email already registered") from e
        await self.session.refresh(record)

        logger.info("Identity created", identity_id=str(record.id))
        return record.to_identity()

    async def sign_in(self, email: str, secret: str) -> Identity:
        """Validate credentials and make the identity current.

        Raises AuthenticationError on unknown email, wrong secret or inactive account.
        """
        record = await self.credential_repo.get_by_email(normalize_email(email))

        # Always verify to keep timing independent of whether the email exists
        password_hash = record.hashed_password if record else DUMMY_PASSWORD_HASH
        password_valid = verify_password(secret, password_hash)

        if record is None or not password_valid or not record.is_active:
            raise AuthenticationError("Invalid email or password")

        identity = record.to_identity()
        await self.set_current_identity(identity)
        return identity

    async def sign_out(self) -> None:
        await self.set_current_identity(None)

    async def update_display_name(self, identity: Identity, name: str) -> Identity:
        record = await self.credential_repo.get_by_id(identity.id)
        if record is None:
            raise ProvisioningError(f"Identity {identity.id} not found")
        record.display_name = name
        record.updated_at = utc_now()
        self.session.add(record)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return record.to_identity()

    async def send_credential_reset(self, email: str) -> None:
        """Issue a reset token and email it.

        Raises NotificationError if the identity is unknown or delivery fails.
        """
        settings = get_settings()
        record = await self.credential_repo.get_by_email(normalize_email(email))
        if record is None:
            raise NotificationError("No identity registered for this email")

        token = secrets.token_urlsafe(32)
        record.reset_token_hash = sha256(token.encode()).hexdigest()
        record.reset_token_expires_at = utc_now() + timedelta(
            hours=settings.credential_reset_expire_hours
        )
        self.session.add(record)
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise NotificationError("Credential reset token could not be stored") from e

        sent = await asyncio.to_thread(
            send_credential_reset_email, record.email, token, record.display_name or record.email
        )
        if not sent:
            raise NotificationError("Credential reset email could not be delivered")

    async def confirm_credential_reset(self, token: str, new_secret: str) -> Identity:
        """Consume a reset token and set the account holder's own secret.

        The identity's email counts as verified once the emailed token is used.
        """
        token_hash = sha256(token.encode()).hexdigest()
        record = await self.credential_repo.get_by_valid_reset_hash(token_hash)
        if record is None:
            raise AuthenticationError("Invalid or expired reset token")

        record.hashed_password = hash_password(new_secret)
        record.reset_token_hash = None
        record.reset_token_expires_at = None
        record.email_verified = True
        record.updated_at = utc_now()
        self.session.add(record)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Credential reset completed", identity_id=str(record.id))
        return record.to_identity()

    async def get_identity(self, identity_id: UUID) -> Identity | None:
        record = await self.credential_repo.get_by_id(identity_id)
        if record is None or not record.is_active:
            return None
        return record.to_identity()
