"""Role authorization gate.

`evaluate_access` is a pure function of a Session snapshot. `RouteGuard`
binds a configuration and reads the snapshot from a SessionManager on every
call; no decision is cached across session changes.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from src.portal.core.errors import AuthorizationError
from src.portal.core.logging import get_logger
from src.portal.models import Role, Session

if TYPE_CHECKING:
    from src.portal.services.session_manager import SessionManager

logger = get_logger(__name__)


class GateState(str, Enum):
    INITIALIZING = "initializing"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    ALLOWED = "allowed"


class DenialReason(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN_ROLE = "forbidden_role"
    UNVERIFIED = "unverified"
    UNAPPROVED = "unapproved"


@dataclass(frozen=True)
class GuardConfig:
    allowed_roles: frozenset[Role | str] | None = None
    require_verification: bool = False
    require_approval: bool = False

    @classmethod
    def for_roles(cls, roles: Iterable[Role | str], **kwargs: bool) -> "GuardConfig":
        return cls(allowed_roles=frozenset(roles), **kwargs)


@dataclass(frozen=True)
class AccessDecision:
    state: GateState
    reason: DenialReason | None = None

    @property
    def allowed(self) -> bool:
        return self.state is GateState.ALLOWED

    @property
    def pending(self) -> bool:
        return self.state is GateState.INITIALIZING


INITIALIZING = AccessDecision(GateState.INITIALIZING)
ALLOWED = AccessDecision(GateState.ALLOWED)


def evaluate_access(session: Session, config: GuardConfig) -> AccessDecision:
    """Decide whether `session` passes `config`.

    Checks run in a fixed order: loading, identity, role, verification,
    approval. The first failing check determines the outcome.
    """
    if session.loading:
        return INITIALIZING
    if not session.is_authenticated:
        return AccessDecision(GateState.UNAUTHENTICATED, DenialReason.UNAUTHENTICATED)
    if config.allowed_roles is not None and not session.has_role(config.allowed_roles):
        return AccessDecision(GateState.FORBIDDEN, DenialReason.FORBIDDEN_ROLE)
    if config.require_verification and not session.is_verified:
        return AccessDecision(GateState.FORBIDDEN, DenialReason.UNVERIFIED)
    if config.require_approval and not session.is_approved:
        return AccessDecision(GateState.FORBIDDEN, DenialReason.UNAPPROVED)
    return ALLOWED


class RouteGuard:
    """A GuardConfig bound to a protected action or route."""

    def __init__(self, config: GuardConfig | None = None):
        self.config = config or GuardConfig()

    def check(self, manager: "SessionManager") -> AccessDecision:
        """Evaluate the manager's current session. May return INITIALIZING."""
        return evaluate_access(manager.session, self.config)

    async def resolve(
        self, manager: "SessionManager", timeout: float | None = None
    ) -> AccessDecision:
        """Wait for any in-flight identity change, then evaluate."""
        decision = self.check(manager)
        while decision.pending:
            await manager.wait_until_ready(timeout)
            decision = self.check(manager)
        return decision

    async def enforce(
        self, manager: "SessionManager", timeout: float | None = None
    ) -> Session:
        """Resolve the decision and raise AuthorizationError on denial.

        Returns the session snapshot that was allowed.
        """
        decision = await self.resolve(manager, timeout)
        if not decision.allowed:
            reason = decision.reason or DenialReason.UNAUTHENTICATED
            identity = manager.identity
            logger.info(
                "Access denied",
                reason=reason.value,
                identity_id=str(identity.id) if identity else None,
            )
            raise AuthorizationError(_DENIAL_MESSAGES[reason], reason=reason.value)
        return manager.session


_DENIAL_MESSAGES = {
    DenialReason.UNAUTHENTICATED: "Authentication required",
    DenialReason.FORBIDDEN_ROLE: "Your role does not permit this action",
    DenialReason.UNVERIFIED: "Your account has not been verified",
    DenialReason.UNAPPROVED: "Your account has not been approved",
}
