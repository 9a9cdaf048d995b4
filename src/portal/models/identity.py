"""Identity models - owned by the credential provider."""

from datetime import datetime
from uuid import UUID, uuid7

from sqlmodel import Field, SQLModel

from src.portal.models.base import utc_now


class Identity(SQLModel):
    """Authenticated identity as seen by the rest of the core.

    Profiles reference an identity by id; they never copy credentials.
    """

    id: UUID
    email: str
    display_name: str = ""
    email_verified: bool = False


class CredentialRecord(SQLModel, table=True):
    """Stored credentials for the SQL-backed credential provider."""

    __tablename__ = "credentials"

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    email: str = Field(max_length=255, unique=True, index=True)
    hashed_password: str = Field(max_length=255)
    display_name: str = Field(default="", max_length=100)
    email_verified: bool = Field(default=False)
    is_active: bool = Field(default=True)
    reset_token_hash: str | None = Field(default=None, max_length=64, index=True)
    reset_token_expires_at: datetime | None = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def to_identity(self) -> Identity:
        return Identity(
            id=self.id,
            email=self.email,
            display_name=self.display_name,
            email_verified=self.email_verified,
        )
