from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.portal.models.enums import (
    ApplicationKind,
    ApplicationStatus,
    ProfileStatus,
    Role,
)
from src.portal.schemas.profile import ProfileRead


class ApplicationRead(BaseModel):
    id: UUID
    kind: ApplicationKind
    submitted_fields: dict[str, Any]
    status: ApplicationStatus
    priority: str
    reviewed_by: UUID | None = None
    review_notes: str | None = None
    submitted_at: datetime
    last_updated: datetime

    model_config = {"from_attributes": True}


class ApplicationReviewRequest(BaseModel):
    status: ApplicationStatus
    notes: str | None = Field(None, max_length=2000)

    @field_validator("status")
    @classmethod
    def validate_decision(cls, v: ApplicationStatus) -> ApplicationStatus:
        if v not in (ApplicationStatus.APPROVED, ApplicationStatus.REJECTED):
            raise ValueError("Review decision must be 'approved' or 'rejected'")
        return v


class ApplicationReviewResponse(BaseModel):
    application_id: UUID
    status: ApplicationStatus
    profile: ProfileRead | None = None
    email_sent: bool = False


class StaffUserCreate(BaseModel):
    """Directly provisioned staff account. `role` is a display label only."""

    email: EmailStr
    display_name: str = Field(min_length=1, max_length=100)
    role: str | None = Field(None, max_length=100)
    department: str | None = Field(None, max_length=255)
    permissions: list[str] = []
    phone: str | None = Field(None, max_length=50)
    location: str | None = Field(None, max_length=255)
    bio: str | None = None


class EstateUserCreate(BaseModel):
    """Directly provisioned estate-manager account."""

    email: EmailStr
    name: str = Field(min_length=1, max_length=100)
    estate: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    location: str | None = Field(None, max_length=255)


class ProvisionResponse(BaseModel):
    profile: ProfileRead
    email_sent: bool


class UserStatusUpdate(BaseModel):
    status: ProfileStatus


class UserRoleUpdate(BaseModel):
    role: Role
