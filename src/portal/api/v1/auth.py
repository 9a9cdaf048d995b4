"""Authentication endpoints."""

from fastapi import APIRouter, status

from src.portal.api.dependencies import (
    AuthenticatedSession,
    CredentialProviderDep,
    SessionManagerDep,
)
from src.portal.core.security import create_access_token
from src.portal.models import Identity, Profile
from src.portal.schemas import (
    CredentialResetConfirm,
    IdentityRead,
    ProfileRead,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
)

router = APIRouter(prefix="/auth", tags=["auth"])


def _session_response(identity: Identity, profile: Profile | None) -> SignInResponse:
    return SignInResponse(
        access_token=create_access_token(identity.id),
        identity=IdentityRead(
            id=str(identity.id),
            email=identity.email,
            display_name=identity.display_name,
            email_verified=identity.email_verified,
        ),
        profile=ProfileRead.model_validate(profile) if profile is not None else None,
    )


@router.post(
    "/sign-in",
    response_model=SignInResponse,
    responses={
        200: {"description": "Signed in; bearer token and profile returned"},
        401: {"description": "Invalid credentials"},
    },
)
async def sign_in(data: SignInRequest, manager: SessionManagerDep) -> SignInResponse:
    """Authenticate with email and password."""
    await manager.start()
    identity, profile = await manager.sign_in(str(data.email), data.password)
    return _session_response(identity, profile)


@router.post(
    "/sign-up",
    response_model=SignInResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "Account created with a pending profile"},
        422: {"description": "Validation error"},
        502: {"description": "Identity could not be created (e.g. email already registered)"},
    },
)
async def sign_up(data: SignUpRequest, manager: SessionManagerDep) -> SignInResponse:
    """Register a new account. The profile starts pending until an administrator approves it."""
    await manager.start()
    extra = data.model_dump(include={"phone", "location"}, exclude_none=True)
    identity, profile = await manager.sign_up(
        str(data.email), data.password, data.display_name, data.role, extra
    )
    return _session_response(identity, profile)


@router.post(
    "/sign-out",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={401: {"description": "Not authenticated"}},
)
async def sign_out(session: AuthenticatedSession, manager: SessionManagerDep) -> None:
    """Sign out. Bearer tokens are stateless; clients discard theirs."""
    await manager.sign_out()


@router.post(
    "/credential-reset/confirm",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        401: {"description": "Invalid or expired reset token"},
        422: {"description": "Validation error"},
    },
)
async def confirm_credential_reset(
    data: CredentialResetConfirm, credentials: CredentialProviderDep
) -> None:
    """Set a new password using the token from a credential-reset email."""
    await credentials.confirm_credential_reset(data.token, data.new_password)
