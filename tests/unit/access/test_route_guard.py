"""
Tests unitaires pour LOT 6: Access - Route Guard

Transitions:
- restauration en cours → LOADING
- pas de session → login avec mémorisation de la destination
- rôle insuffisant → écran d'accueil
- sinon → rendu
"""

from typing import Optional
from unittest.mock import Mock

import pytest

from src.access import GuardDecision, GuardOutcome, IRouteGuard, RouteGuard, RouteRequirement
from src.session import Identity, SessionManager, SessionStatus

ADMIN = Identity(id=1, username="admin", role_name="Administrador")
RESIDENT = Identity(id=2, username="residente", role_name="Residente")
STAFF = Identity(id=3, username="soporte", is_privileged=True)

USERS_SCREEN = RouteRequirement(required_role="Administrador")


def session_in(
    status: SessionStatus, identity: Optional[Identity] = None, loading: bool = False
) -> Mock:
    session = Mock(spec=SessionManager)
    session.is_loading = loading
    session.current_state.return_value = status
    session.current_identity.return_value = identity
    return session


class TestLoading:
    def test_loading_while_restoring(self) -> None:
        guard = RouteGuard(session_in(SessionStatus.AUTHENTICATING, loading=True))

        decision = guard.evaluate("/dashboard/users", USERS_SCREEN)

        assert decision == GuardDecision(GuardOutcome.LOADING)
        assert not decision.renders


class TestRedirectToLogin:
    @pytest.mark.parametrize(
        "status", [SessionStatus.UNAUTHENTICATED, SessionStatus.DEAD]
    )
    def test_no_session(self, status: SessionStatus) -> None:
        guard = RouteGuard(session_in(status))

        decision = guard.evaluate("/dashboard/users", USERS_SCREEN)

        assert decision.outcome == GuardOutcome.REDIRECT
        assert decision.redirect_to == "/login"
        assert decision.return_to == "/dashboard/users"

    def test_public_requirement_still_needs_session(self) -> None:
        guard = RouteGuard(session_in(SessionStatus.UNAUTHENTICATED))

        decision = guard.evaluate("/dashboard")

        assert decision.redirect_to == "/login"
        assert decision.return_to == "/dashboard"

    def test_custom_login_path(self) -> None:
        guard = RouteGuard(session_in(SessionStatus.DEAD), login_path="/ingresar")

        assert guard.evaluate("/x").redirect_to == "/ingresar"
        assert guard.login_path == "/ingresar"


class TestRoleCheck:
    def test_admin_renders_users_screen(self) -> None:
        guard = RouteGuard(session_in(SessionStatus.AUTHENTICATED, ADMIN))

        assert guard.evaluate("/dashboard/users", USERS_SCREEN).renders

    def test_staff_override(self) -> None:
        guard = RouteGuard(session_in(SessionStatus.AUTHENTICATED, STAFF))

        assert guard.evaluate("/dashboard/users", USERS_SCREEN).renders

    def test_resident_sent_to_landing(self) -> None:
        guard = RouteGuard(session_in(SessionStatus.AUTHENTICATED, RESIDENT))

        decision = guard.evaluate("/dashboard/users", USERS_SCREEN)

        assert decision.outcome == GuardOutcome.REDIRECT
        assert decision.redirect_to == "/dashboard"
        assert decision.return_to is None

    def test_no_requirement_renders(self) -> None:
        guard = RouteGuard(session_in(SessionStatus.AUTHENTICATED, RESIDENT))

        assert guard.evaluate("/dashboard/properties").renders
        assert guard.evaluate("/dashboard", RouteRequirement()).renders

    def test_renders_during_background_renewal(self) -> None:
        guard = RouteGuard(session_in(SessionStatus.RENEWING, ADMIN))

        assert guard.evaluate("/dashboard/users", USERS_SCREEN).renders

    def test_custom_landing_and_admin_role(self) -> None:
        admin = Identity(id=9, username="root", role_name="Admin")
        guard = RouteGuard(
            session_in(SessionStatus.AUTHENTICATED, RESIDENT),
            landing_path="/inicio",
            admin_role="Admin",
        )

        assert guard.evaluate("/x", RouteRequirement("Admin")).redirect_to == "/inicio"
        assert guard.landing_path == "/inicio"
        assert RouteGuard(session_in(SessionStatus.AUTHENTICATED, admin), admin_role="Admin").evaluate(
            "/x", RouteRequirement("Admin")
        ).renders

    def test_implements_interface(self) -> None:
        assert isinstance(RouteGuard(session_in(SessionStatus.UNAUTHENTICATED)), IRouteGuard)
