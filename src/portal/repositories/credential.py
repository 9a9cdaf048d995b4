"""Repository for CredentialRecord entity."""

from sqlmodel import select

from src.portal.models import CredentialRecord
from src.portal.models.base import utc_now
from src.portal.repositories.base import BaseRepository


class CredentialRepository(BaseRepository[CredentialRecord]):
    """Repository for stored credentials."""

    model = CredentialRecord

    async def get_by_email(self, email: str) -> CredentialRecord | None:
        """Get credentials by (normalized) email address."""
        result = await self.session.execute(
            select(CredentialRecord).where(CredentialRecord.email == email)
        )
        return result.scalar_one_or_none()

    async def exists_by_email(self, email: str) -> bool:
        """Check if credentials with the given email exist."""
        record = await self.get_by_email(email)
        return record is not None

    async def get_by_valid_reset_hash(self, token_hash: str) -> CredentialRecord | None:
        """Get credentials whose reset token matches and has not expired."""
        result = await self.session.execute(
            select(CredentialRecord).where(
                CredentialRecord.reset_token_hash == token_hash,
                CredentialRecord.reset_token_expires_at > utc_now(),  # type: ignore[operator]
            )
        )
        return result.scalar_one_or_none()
