"""Repository factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.portal.api.dependencies.db import DBSession
from src.portal.repositories import (
    ApplicationRepository,
    CredentialRepository,
    ProfileRepository,
)


def get_credential_repository(session: DBSession) -> CredentialRepository:
    return CredentialRepository(session)


def get_profile_repository(session: DBSession) -> ProfileRepository:
    return ProfileRepository(session)


def get_application_repository(session: DBSession) -> ApplicationRepository:
    return ApplicationRepository(session)


CredentialRepo = Annotated[CredentialRepository, Depends(get_credential_repository)]
ProfileRepo = Annotated[ProfileRepository, Depends(get_profile_repository)]
ApplicationRepo = Annotated[ApplicationRepository, Depends(get_application_repository)]
