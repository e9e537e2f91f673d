"""
LOT 6: Access - Route Guard

Décision consultée avant chaque rendu d'écran protégé. Aucun état propre:
tout est lu dans le gestionnaire de session au moment de l'appel.
"""

from typing import Optional

from ..session import SessionManager, SessionStatus
from .interfaces import (
    DEFAULT_ADMIN_ROLE,
    DEFAULT_LANDING_PATH,
    DEFAULT_LOGIN_PATH,
    GuardDecision,
    GuardOutcome,
    IRouteGuard,
    RouteRequirement,
)
from .roles import role_satisfies


class RouteGuard(IRouteGuard):
    """
    Garde de route.

    Transitions:
        restauration en cours                → LOADING
        UNAUTHENTICATED / DEAD / sans profil → REDIRECT login (return_to = location)
        rôle requis non satisfait            → REDIRECT accueil
        sinon                                → RENDER

    Example:
        guard = RouteGuard(session_manager)
        decision = guard.evaluate("/dashboard/users", RouteRequirement("Administrador"))
    """

    def __init__(
        self,
        session: SessionManager,
        login_path: str = DEFAULT_LOGIN_PATH,
        landing_path: str = DEFAULT_LANDING_PATH,
        admin_role: str = DEFAULT_ADMIN_ROLE,
    ) -> None:
        self._session = session
        self._login_path = login_path
        self._landing_path = landing_path
        self._admin_role = admin_role

    @property
    def login_path(self) -> str:
        return self._login_path

    @property
    def landing_path(self) -> str:
        return self._landing_path

    def evaluate(
        self, location: str, requirement: Optional[RouteRequirement] = None
    ) -> GuardDecision:
        if self._session.is_loading:
            return GuardDecision(GuardOutcome.LOADING)

        identity = self._session.current_identity()
        status = self._session.current_state()
        if identity is None or status in (SessionStatus.UNAUTHENTICATED, SessionStatus.DEAD):
            return GuardDecision(
                GuardOutcome.REDIRECT, redirect_to=self._login_path, return_to=location
            )

        required_role = requirement.required_role if requirement else None
        if not role_satisfies(identity, required_role, self._admin_role):
            return GuardDecision(GuardOutcome.REDIRECT, redirect_to=self._landing_path)

        return GuardDecision(GuardOutcome.RENDER)
