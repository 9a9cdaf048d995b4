"""Repository for Profile entity - SQL implementation of the profile store."""

from typing import Any
from uuid import UUID

from src.portal.core.errors import NotFoundError
from src.portal.models import Profile, ProfileStatus, parse_role
from src.portal.models.base import utc_now
from src.portal.repositories.base import BaseRepository

_IMMUTABLE_FIELDS = frozenset({"id", "created_at"})


def coerce_profile_values(values: dict[str, Any]) -> dict[str, Any]:
    """Convert role/status strings in a patch or filter to their enums."""
    coerced = dict(values)
    if coerced.get("role") is not None:
        coerced["role"] = parse_role(coerced["role"])
    if coerced.get("status") is not None:
        coerced["status"] = ProfileStatus(coerced["status"])
    return coerced


def apply_profile_patch(profile: Profile, partial: dict[str, Any]) -> Profile:
    """Apply a partial update to a profile in place and bump updated_at.

    Raises ValueError for unknown or immutable fields.
    """
    for field, value in coerce_profile_values(partial).items():
        if field in _IMMUTABLE_FIELDS or field not in Profile.model_fields:
            raise ValueError(f"Profile field cannot be updated: {field}")
        setattr(profile, field, value)
    profile.updated_at = utc_now()
    return profile


class ProfileRepository(BaseRepository[Profile]):
    """Profile store backed by the profiles table."""

    model = Profile

    async def get_profile(self, profile_id: UUID) -> Profile | None:
        return await self.get_by_id(profile_id)

    async def set_profile(self, profile_id: UUID, profile: Profile) -> Profile:
        """Create or overwrite the profile stored under profile_id."""
        if profile.id != profile_id:
            raise ValueError("Profile id must equal the owning identity id")
        try:
            merged = await self.session.merge(profile)
            await self.session.commit()
            await self.session.refresh(merged)
            return merged
        except Exception:
            await self.session.rollback()
            raise

    async def update_profile(self, profile_id: UUID, partial: dict[str, Any]) -> Profile:
        profile = await self.get_by_id(profile_id)
        if profile is None:
            raise NotFoundError(f"Profile {profile_id} not found")
        try:
            apply_profile_patch(profile, partial)
            self.session.add(profile)
            await self.session.commit()
            await self.session.refresh(profile)
            return profile
        except Exception:
            await self.session.rollback()
            raise

    async def query_profiles(self, **filters: Any) -> list[Profile]:
        return await self.list_where(
            order_by=Profile.created_at.desc(),  # type: ignore[attr-defined]
            **coerce_profile_values(filters),
        )
