"""Profile model - application-level record, one-to-one with an Identity."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from src.portal.models.base import utc_now
from src.portal.models.enums import ProfileStatus, Role


class Profile(SQLModel, table=True):
    """User profile keyed by the owning identity's id.

    `role` is the only authorization-relevant field; `display_role` is a label.
    """

    __tablename__ = "profiles"

    id: UUID = Field(primary_key=True)
    email: str = Field(max_length=255, index=True)
    display_name: str = Field(max_length=100)
    role: Role = Field(index=True)
    status: ProfileStatus = Field(default=ProfileStatus.PENDING, index=True)
    is_verified: bool = Field(default=False)
    display_role: str | None = Field(default=None, max_length=100)
    company: str | None = Field(default=None, max_length=255)
    skills: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    location: str | None = Field(default=None, max_length=255)
    region: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=50)
    bio: str | None = Field(default=None)
    years_of_experience: int | None = Field(default=None)
    id_type: str | None = Field(default=None, max_length=50)
    id_number: str | None = Field(default=None, max_length=100)
    profile_image: str | None = Field(default=None, max_length=500)
    id_image_url: str | None = Field(default=None, max_length=500)
    created_by: UUID | None = Field(default=None)
    verification_date: datetime | None = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
