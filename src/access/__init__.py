"""
LOT 6: Access

Contrôle d'accès côté console:
- Prédicat de rôle unique avec dérogation administrateur (is_staff)
- Garde de route: chargement, redirection login/accueil, rendu
- Filtre de menu récursif et idempotent
"""

from .interfaces import (
    # Constants
    DEFAULT_ADMIN_ROLE,
    DEFAULT_LOGIN_PATH,
    DEFAULT_LANDING_PATH,
    # Enums
    GuardOutcome,
    # Data classes
    RouteRequirement,
    GuardDecision,
    NavEntry,
    # Interfaces
    IRouteGuard,
)
from .roles import role_satisfies, is_admin, has_role
from .route_guard import RouteGuard
from .menu_filter import DEFAULT_NAVIGATION, filter_navigation, find_entry

__all__ = [
    # Constants
    "DEFAULT_ADMIN_ROLE",
    "DEFAULT_LOGIN_PATH",
    "DEFAULT_LANDING_PATH",
    "DEFAULT_NAVIGATION",
    # Enums
    "GuardOutcome",
    # Data classes
    "RouteRequirement",
    "GuardDecision",
    "NavEntry",
    # Interfaces
    "IRouteGuard",
    # Implementations
    "RouteGuard",
    "role_satisfies",
    "is_admin",
    "has_role",
    "filter_navigation",
    "find_entry",
]
