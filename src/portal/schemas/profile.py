from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.portal.models.enums import ProfileStatus, Role

# Fields that identify a profile or carry authorization; never changed by a partial update
PROTECTED_PROFILE_FIELDS = frozenset({"id", "email", "role"})


class ProfileUpdate(BaseModel):
    """Partial profile update. Unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")

    display_name: str | None = Field(None, min_length=1, max_length=100)
    status: ProfileStatus | None = None
    is_verified: bool | None = None
    display_role: str | None = Field(None, max_length=100)
    company: str | None = Field(None, max_length=255)
    skills: list[str] | None = None
    location: str | None = Field(None, max_length=255)
    region: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=50)
    bio: str | None = None
    years_of_experience: int | None = Field(None, ge=0)
    id_type: str | None = Field(None, max_length=50)
    id_number: str | None = Field(None, max_length=100)
    profile_image: str | None = Field(None, max_length=500)
    id_image_url: str | None = Field(None, max_length=500)
    created_by: UUID | None = None
    verification_date: datetime | None = None


class ProfileRead(BaseModel):
    id: UUID
    email: str
    display_name: str
    role: Role
    status: ProfileStatus
    is_verified: bool
    display_role: str | None = None
    company: str | None = None
    skills: list[str] = []
    location: str | None = None
    region: str | None = None
    phone: str | None = None
    bio: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SelfProfileUpdate(BaseModel):
    """Fields an account holder may change on their own profile."""

    model_config = ConfigDict(extra="forbid")

    display_name: str | None = Field(None, min_length=1, max_length=100)
    company: str | None = Field(None, max_length=255)
    skills: list[str] | None = None
    location: str | None = Field(None, max_length=255)
    region: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=50)
    bio: str | None = None
    profile_image: str | None = Field(None, max_length=500)
