"""Test helper functions for common data creation patterns."""

from sqlalchemy.ext.asyncio import AsyncEngine

from src.portal.core.db import get_session
from src.portal.core.security import create_access_token, hash_password
from src.portal.models import Application, ApplicationKind, CredentialRecord, Profile
from tests.factories import ApplicationFactory

DEFAULT_TEST_PASSWORD = "correct-horse-battery-staple"


async def create_account(
    engine: AsyncEngine,
    profile: Profile | None = None,
    email: str | None = None,
    password: str = DEFAULT_TEST_PASSWORD,
) -> dict:
    """Store credentials and, if given, a profile under the same id.

    Args:
        engine: Engine of the test database
        profile: Profile to store; its id is replaced by the identity id
        email: Identity email, defaults to the profile's email
        password: Plaintext password to hash

    Returns:
        Dict with the account's id, email, password and a bearer token
    """
    email = email or (profile.email if profile is not None else "no-profile@example.com")
    record = CredentialRecord(email=email, hashed_password=hash_password(password))
    async with get_session(engine) as session:
        session.add(record)
        await session.flush()
        if profile is not None:
            profile.id = record.id
            session.add(profile)
        await session.commit()

    return {
        "id": record.id,
        "email": email,
        "password": password,
        "token": create_access_token(record.id),
    }


async def create_application(
    engine: AsyncEngine, kind: ApplicationKind = ApplicationKind.HOME_OWNER, **kwargs
) -> Application:
    """Store a pending application built by ApplicationFactory."""
    if kind == ApplicationKind.ARTISAN:
        application = ApplicationFactory.artisan(**kwargs)
    else:
        application = ApplicationFactory.build(**kwargs)
    async with get_session(engine) as session:
        session.add(application)
        await session.commit()
    return application


def auth_headers(account: dict) -> dict[str, str]:
    return {"Authorization": f"Bearer {account['token']}"}
