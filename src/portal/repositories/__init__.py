"""Repository layer - data access abstraction."""

from src.portal.repositories.application import ApplicationRepository
from src.portal.repositories.base import BaseRepository
from src.portal.repositories.credential import CredentialRepository
from src.portal.repositories.profile import ProfileRepository

__all__ = [
    "ApplicationRepository",
    "BaseRepository",
    "CredentialRepository",
    "ProfileRepository",
]
