"""
LOT 3: Network - Interfaces

Contrats de la couche transport HTTP partagée par le client Identity API
et la passerelle de requêtes.

Règles:
    - Timeout connexion 10 secondes max
    - Timeout requête 30 secondes max (configurable par endpoint)
    - Un timeout pendant un renouvellement vaut échec du renouvellement
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import httpx


class TimeoutType(Enum):
    """Types de timeout supportés."""

    CONNECTION = "connection"
    REQUEST = "request"
    READ = "read"
    WRITE = "write"


@dataclass
class TimeoutConfig:
    """
    Configuration des timeouts (secondes).

    connection_timeout: max 10s
    request_timeout: max 30s, sert aussi de pool timeout
    """

    connection_timeout: float = 10.0
    request_timeout: float = 30.0
    read_timeout: Optional[float] = None
    write_timeout: Optional[float] = None


class ITimeoutManager(ABC):
    """Interface gestion timeouts."""

    @abstractmethod
    def get_timeout(
        self, timeout_type: TimeoutType, endpoint: Optional[str] = None
    ) -> float:
        """
        Retourne timeout configuré.

        Args:
            timeout_type: Type de timeout
            endpoint: Chemin optionnel pour config spécifique (ex: "/auth/token/refresh/")

        Returns:
            Valeur du timeout en secondes
        """
        pass

    @abstractmethod
    def set_endpoint_timeout(self, endpoint: str, config: TimeoutConfig) -> None:
        """Configure timeout spécifique par endpoint."""
        pass

    @abstractmethod
    def validate_timeout(self, timeout_type: TimeoutType, value: float) -> bool:
        """Valide que timeout respecte les limites."""
        pass

    @abstractmethod
    def as_httpx_timeout(self, endpoint: Optional[str] = None) -> httpx.Timeout:
        """Convertit la configuration (défaut ou endpoint) en httpx.Timeout."""
        pass
