"""Session restoration and route-guard dependencies."""

from collections.abc import Awaitable, Callable, Iterable
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header

from src.portal.api.dependencies.services import SessionManagerDep
from src.portal.core.logging import bind_session_context, get_logger
from src.portal.core.security import decode_token
from src.portal.models import Role, Session
from src.portal.services import GuardConfig, RouteGuard, SessionManager

logger = get_logger(__name__)


def _identity_id_from_header(authorization: str | None) -> UUID | None:
    """Extract the identity id from a bearer token. None if absent or invalid."""
    if not authorization or not authorization.startswith("Bearer "):
        return None

    payload = decode_token(authorization[7:])
    if payload is None or payload.get("type") != "access":
        return None

    try:
        return UUID(str(payload.get("sub")))
    except ValueError:
        return None


async def get_request_session_manager(
    manager: SessionManagerDep,
    authorization: Annotated[str | None, Header()] = None,
) -> SessionManager:
    """Rebuild the session for this request from its bearer token.

    A missing or invalid token yields an unauthenticated session; the route
    guard decides what that means for the endpoint.
    """
    identity_id = _identity_id_from_header(authorization)
    if identity_id is None:
        await manager.start()
    else:
        await manager.restore(identity_id)

    session = manager.session
    if session.identity is not None:
        bind_session_context(
            session.identity.id,
            session.profile.role.value if session.profile else None,
            session.identity.email,
        )
    return manager


RequestSessionManager = Annotated[SessionManager, Depends(get_request_session_manager)]


def require_access(
    allowed_roles: Iterable[Role] | None = None,
    require_verification: bool = False,
    require_approval: bool = False,
) -> Callable[[SessionManager], Awaitable[Session]]:
    """Build a dependency that enforces a GuardConfig on the request session.

    Denials raise AuthorizationError; the exception handler turns an
    unauthenticated denial into 401 and any other into 403.
    """
    guard = RouteGuard(
        GuardConfig(
            allowed_roles=frozenset(allowed_roles) if allowed_roles is not None else None,
            require_verification=require_verification,
            require_approval=require_approval,
        )
    )

    async def dependency(manager: RequestSessionManager) -> Session:
        return await guard.enforce(manager)

    return dependency


AuthenticatedSession = Annotated[Session, Depends(require_access())]
AdminSession = Annotated[Session, Depends(require_access(allowed_roles=[Role.ADMIN]))]
AdminOrStaffSession = Annotated[
    Session, Depends(require_access(allowed_roles=[Role.ADMIN, Role.STAFF]))
]
