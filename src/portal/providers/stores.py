"""Profile and application store contracts.

The core talks to document-style stores keyed by id. The SQL repositories in
src.portal.repositories satisfy these protocols; tests use in-memory fakes.
"""

from typing import Any, Protocol
from uuid import UUID

from src.portal.models import Application, Profile


class ProfileStore(Protocol):
    async def get_profile(self, profile_id: UUID) -> Profile | None: ...

    async def set_profile(self, profile_id: UUID, profile: Profile) -> Profile: ...

    async def update_profile(self, profile_id: UUID, partial: dict[str, Any]) -> Profile: ...

    async def query_profiles(self, **filters: Any) -> list[Profile]: ...


class ApplicationStore(Protocol):
    async def get_application(self, application_id: UUID) -> Application | None: ...

    async def update_application(
        self, application_id: UUID, partial: dict[str, Any]
    ) -> Application: ...

    async def query_applications(self, **filters: Any) -> list[Application]: ...


class PendingCountSource(Protocol):
    """Supplies pending-item counts that live outside the core (property verifications)."""

    async def count_pending_verifications(self) -> int: ...
