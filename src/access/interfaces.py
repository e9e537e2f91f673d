"""
LOT 6: Access - Interfaces

Garde de route et filtre de menu par rôle.

Règles:
    - Le rôle requis est satisfait si role_name est égal, ou si l'utilisateur
      est privilégié (is_staff) et que le rôle requis est le rôle administrateur
    - Pas de session → redirection login en mémorisant la destination
    - Rôle insuffisant → redirection vers l'écran d'accueil
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

DEFAULT_ADMIN_ROLE = "Administrador"
DEFAULT_LOGIN_PATH = "/login"
DEFAULT_LANDING_PATH = "/dashboard"


class GuardOutcome(Enum):
    """Issue d'une évaluation de la garde."""

    LOADING = "loading"  # Restauration de session en cours
    REDIRECT = "redirect"
    RENDER = "render"


@dataclass(frozen=True)
class RouteRequirement:
    """Exigence attachée à un écran protégé."""

    required_role: Optional[str] = None


@dataclass(frozen=True)
class GuardDecision:
    """
    Décision de la garde.

    Attributes:
        outcome: LOADING, REDIRECT ou RENDER
        redirect_to: Cible de redirection (REDIRECT uniquement)
        return_to: Destination d'origine à rejouer après login
    """

    outcome: GuardOutcome
    redirect_to: Optional[str] = None
    return_to: Optional[str] = None

    @property
    def renders(self) -> bool:
        return self.outcome == GuardOutcome.RENDER


@dataclass(frozen=True)
class NavEntry:
    """
    Entrée de navigation.

    Attributes:
        label: Libellé affiché
        path: Cible navigable (None pour un simple groupe)
        required_role: Rôle requis (None = visible par tous)
        children: Sous-entrées
    """

    label: str
    path: Optional[str] = None
    required_role: Optional[str] = None
    children: Tuple["NavEntry", ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NavEntry":
        """
        Construit une entrée depuis un dict YAML.

        Raises:
            ValueError: label manquant ou children non-liste
        """
        if not isinstance(data, dict) or not data.get("label"):
            raise ValueError("Navigation entry requires a label")
        children = data.get("children") or []
        if not isinstance(children, list):
            raise ValueError(f"children of '{data['label']}' must be a list")
        return cls(
            label=str(data["label"]),
            path=data.get("path") or None,
            required_role=data.get("required_role") or None,
            children=tuple(cls.from_dict(child) for child in children),
        )


class IRouteGuard(ABC):
    """Interface garde de route."""

    @abstractmethod
    def evaluate(
        self, location: str, requirement: Optional[RouteRequirement] = None
    ) -> GuardDecision:
        """
        Décide du rendu d'un écran protégé.

        Args:
            location: Emplacement demandé (mémorisé pour retour post-login)
            requirement: Exigence de rôle de l'écran

        Returns:
            GuardDecision
        """
        pass
