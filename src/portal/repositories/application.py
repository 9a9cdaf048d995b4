"""Repository for Application entity - SQL implementation of the application store."""

from typing import Any
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select

from src.portal.core.errors import NotFoundError
from src.portal.models import Application, ApplicationKind, ApplicationStatus
from src.portal.repositories.base import BaseRepository

_UPDATABLE_FIELDS = frozenset(
    {"status", "reviewed_by", "review_notes", "last_updated", "priority", "submitted_fields"}
)


def coerce_application_values(values: dict[str, Any]) -> dict[str, Any]:
    """Convert kind/status strings in a patch or filter to their enums."""
    coerced = dict(values)
    if coerced.get("kind") is not None:
        coerced["kind"] = ApplicationKind(coerced["kind"])
    if coerced.get("status") is not None:
        coerced["status"] = ApplicationStatus(coerced["status"])
    return coerced


def apply_application_patch(application: Application, partial: dict[str, Any]) -> Application:
    """Apply a partial update in place. Raises ValueError for fields outside the review record."""
    for field, value in coerce_application_values(partial).items():
        if field not in _UPDATABLE_FIELDS:
            raise ValueError(f"Application field cannot be updated: {field}")
        setattr(application, field, value)
    return application


class ApplicationRepository(BaseRepository[Application]):
    """Application store backed by the applications table."""

    model = Application

    async def submit_application(
        self, kind: ApplicationKind, submitted_fields: dict[str, Any], priority: str = "medium"
    ) -> Application:
        """Record a new pending application."""
        application = Application(kind=kind, submitted_fields=submitted_fields, priority=priority)
        try:
            self.add(application)
            await self.session.commit()
            await self.session.refresh(application)
            return application
        except Exception:
            await self.session.rollback()
            raise

    async def get_application(self, application_id: UUID) -> Application | None:
        return await self.get_by_id(application_id)

    async def update_application(
        self, application_id: UUID, partial: dict[str, Any]
    ) -> Application:
        application = await self.get_by_id(application_id)
        if application is None:
            raise NotFoundError(f"Application {application_id} not found")
        try:
            apply_application_patch(application, partial)
            self.session.add(application)
            await self.session.commit()
            await self.session.refresh(application)
            return application
        except Exception:
            await self.session.rollback()
            raise

    async def query_applications(self, **filters: Any) -> list[Application]:
        return await self.list_where(
            order_by=Application.submitted_at.desc(),  # type: ignore[attr-defined]
            **coerce_application_values(filters),
        )

    async def count_by_status(self, kind: ApplicationKind, status: ApplicationStatus) -> int:
        """Count applications of a kind in a given status."""
        result = await self.session.execute(
            select(func.count())
            .select_from(Application)
            .where(Application.kind == kind, Application.status == status)
        )
        return int(result.scalar_one())
