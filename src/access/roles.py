"""
LOT 6: Access - Roles

Prédicat unique d'appartenance à un rôle, partagé par la garde de route
et le filtre de menu.
"""

from typing import Optional

from ..session import Identity
from .interfaces import DEFAULT_ADMIN_ROLE


def role_satisfies(
    identity: Optional[Identity],
    required_role: Optional[str],
    admin_role: str = DEFAULT_ADMIN_ROLE,
) -> bool:
    """
    Vérifie si l'identité satisfait un rôle requis.

    Règle:
        aucun rôle requis                               → True
        aucune identité                                 → False
        role_name == required_role                      → True
        is_privileged et required_role == admin_role    → True

    Example:
        role_satisfies(staff_identity, "Administrador")  # True si is_staff
    """
    if not required_role:
        return True
    if identity is None:
        return False
    if identity.role_name == required_role:
        return True
    return identity.is_privileged and required_role == admin_role


def is_admin(identity: Optional[Identity], admin_role: str = DEFAULT_ADMIN_ROLE) -> bool:
    """Vrai pour le rôle administrateur ou un utilisateur privilégié."""
    return role_satisfies(identity, admin_role, admin_role)


def has_role(identity: Optional[Identity], role_name: str) -> bool:
    """Égalité stricte du nom de rôle, sans dérogation administrateur."""
    return identity is not None and identity.role_name == role_name
