"""External collaborator contracts and their default implementations."""

from src.portal.providers.credentials import (
    CredentialProvider,
    IdentityChangeNotifier,
    IdentityListener,
    SQLCredentialProvider,
    normalize_email,
)
from src.portal.providers.stores import ApplicationStore, PendingCountSource, ProfileStore

__all__ = [
    "ApplicationStore",
    "CredentialProvider",
    "IdentityChangeNotifier",
    "IdentityListener",
    "PendingCountSource",
    "ProfileStore",
    "SQLCredentialProvider",
    "normalize_email",
]
