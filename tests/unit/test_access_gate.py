"""Tests for the role authorization gate."""

import asyncio

import pytest

from src.portal.core.errors import AuthorizationError
from src.portal.models import Identity, ProfileStatus, Role, Session
from src.portal.services import (
    DenialReason,
    GateState,
    GuardConfig,
    RouteGuard,
    evaluate_access,
)
from tests.factories import ProfileFactory, generate_uuid7

pytestmark = pytest.mark.unit

PASSWORD = "correct horse battery staple"


def _session(role: Role | None = Role.HOME_OWNER, loading: bool = False, **profile_kwargs):
    identity = Identity(id=generate_uuid7(), email="user@example.com")
    profile = None
    if role is not None:
        profile = ProfileFactory.build(id=identity.id, role=role, **profile_kwargs)
    return Session(identity=identity, profile=profile, loading=loading)


class TestEvaluateAccess:
    def test_loading_session_is_initializing(self):
        decision = evaluate_access(Session(loading=True), GuardConfig())

        assert decision.state is GateState.INITIALIZING
        assert decision.reason is None
        assert decision.allowed is False

    def test_no_identity_is_unauthenticated(self):
        decision = evaluate_access(Session(), GuardConfig())

        assert decision.state is GateState.UNAUTHENTICATED
        assert decision.reason is DenialReason.UNAUTHENTICATED

    def test_staff_denied_admin_only_route(self):
        decision = evaluate_access(
            _session(Role.STAFF, status=ProfileStatus.ACTIVE, is_verified=True),
            GuardConfig.for_roles([Role.ADMIN]),
        )

        assert decision.state is GateState.FORBIDDEN
        assert decision.reason is DenialReason.FORBIDDEN_ROLE
        assert decision.allowed is False

    def test_identity_without_profile_fails_role_check(self):
        decision = evaluate_access(_session(role=None), GuardConfig.for_roles([Role.TENANT]))

        assert decision.reason is DenialReason.FORBIDDEN_ROLE

    def test_identity_without_profile_passes_open_guard(self):
        assert evaluate_access(_session(role=None), GuardConfig()).allowed is True

    def test_unverified_denied_when_verification_required(self):
        decision = evaluate_access(
            _session(Role.ARTISAN, is_verified=False, status=ProfileStatus.APPROVED),
            GuardConfig(require_verification=True),
        )

        assert decision.reason is DenialReason.UNVERIFIED

    def test_unapproved_denied_when_approval_required(self):
        decision = evaluate_access(
            _session(Role.ARTISAN, is_verified=True, status=ProfileStatus.PENDING),
            GuardConfig(require_approval=True),
        )

        assert decision.reason is DenialReason.UNAPPROVED

    def test_role_checked_before_verification_and_approval(self):
        decision = evaluate_access(
            _session(Role.TENANT, is_verified=False, status=ProfileStatus.PENDING),
            GuardConfig.for_roles(
                [Role.ADMIN], require_verification=True, require_approval=True
            ),
        )

        assert decision.reason is DenialReason.FORBIDDEN_ROLE

    def test_verification_checked_before_approval(self):
        decision = evaluate_access(
            _session(Role.ADMIN, is_verified=False, status=ProfileStatus.PENDING),
            GuardConfig.for_roles(
                [Role.ADMIN], require_verification=True, require_approval=True
            ),
        )

        assert decision.reason is DenialReason.UNVERIFIED

    def test_loading_checked_before_identity(self):
        session = _session(Role.ADMIN, loading=True)

        assert evaluate_access(session, GuardConfig.for_roles([Role.ADMIN])).pending is True

    def test_all_checks_pass(self):
        decision = evaluate_access(
            _session(Role.ADMIN, is_verified=True, status=ProfileStatus.ACTIVE),
            GuardConfig.for_roles(
                [Role.ADMIN, Role.STAFF], require_verification=True, require_approval=True
            ),
        )

        assert decision.state is GateState.ALLOWED
        assert decision.reason is None

    def test_role_aliases_in_config(self):
        decision = evaluate_access(
            _session(Role.ESTATE_MANAGER), GuardConfig.for_roles(["estate-manager"])
        )

        assert decision.allowed is True


class TestRouteGuard:
    async def test_check_reevaluates_after_session_change(self, manager, credentials, profiles):
        identity = credentials.add_identity("admin@example.com", PASSWORD)
        profiles.put(ProfileFactory.admin(id=identity.id, email=identity.email))
        guard = RouteGuard(GuardConfig.for_roles([Role.ADMIN]))

        assert guard.check(manager).state is GateState.UNAUTHENTICATED

        await manager.sign_in("admin@example.com", PASSWORD)
        assert guard.check(manager).allowed is True

        await manager.sign_out()
        assert guard.check(manager).state is GateState.UNAUTHENTICATED

    async def test_resolve_waits_for_loading(self, manager, credentials, profiles):
        identity = credentials.add_identity("admin@example.com", PASSWORD)
        profiles.put(ProfileFactory.admin(id=identity.id, email=identity.email))
        gate = asyncio.Event()
        profiles.gates[identity.id] = gate
        guard = RouteGuard(GuardConfig.for_roles([Role.ADMIN]))

        change = asyncio.create_task(manager.on_identity_changed(identity))
        await asyncio.sleep(0)
        assert guard.check(manager).pending is True

        resolving = asyncio.create_task(guard.resolve(manager, timeout=1))
        await asyncio.sleep(0)
        gate.set()

        decision = await resolving
        await change
        assert decision.allowed is True

    async def test_enforce_raises_with_reason(self, manager, credentials, profiles):
        identity = credentials.add_identity("staff@example.com", PASSWORD)
        profiles.put(ProfileFactory.staff(id=identity.id, email=identity.email))
        await manager.sign_in("staff@example.com", PASSWORD)
        guard = RouteGuard(GuardConfig.for_roles([Role.ADMIN]))

        with pytest.raises(AuthorizationError) as exc_info:
            await guard.enforce(manager)

        assert exc_info.value.reason == DenialReason.FORBIDDEN_ROLE.value

    async def test_enforce_unauthenticated(self, manager):
        with pytest.raises(AuthorizationError) as exc_info:
            await RouteGuard().enforce(manager)

        assert exc_info.value.reason == "unauthenticated"

    async def test_enforce_returns_allowed_session(self, manager, credentials, profiles):
        identity = credentials.add_identity("admin@example.com", PASSWORD)
        profiles.put(ProfileFactory.admin(id=identity.id, email=identity.email))
        await manager.sign_in("admin@example.com", PASSWORD)

        session = await RouteGuard(GuardConfig.for_roles([Role.ADMIN])).enforce(manager)

        assert session.identity.id == identity.id
