"""Application model - a request to be promoted to a live account."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid7

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from src.portal.models.base import utc_now
from src.portal.models.enums import ApplicationKind, ApplicationStatus


class Application(SQLModel, table=True):
    """Home-owner or artisan application awaiting administrative review."""

    __tablename__ = "applications"

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    kind: ApplicationKind = Field(index=True)
    submitted_fields: dict[str, Any] = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False)
    )
    status: ApplicationStatus = Field(default=ApplicationStatus.PENDING, index=True)
    priority: str = Field(default="medium", max_length=20)
    reviewed_by: UUID | None = Field(default=None)
    review_notes: str | None = Field(default=None)
    submitted_at: datetime = Field(default_factory=utc_now)
    last_updated: datetime = Field(default_factory=utc_now)

    @property
    def applicant_email(self) -> str:
        return str(self.submitted_fields.get("email") or "").strip()

    @property
    def applicant_name(self) -> str:
        return str(self.submitted_fields.get("name") or "").strip()
