"""
CONDOMINIO Console - LOT 1 Core Interfaces
Modèles de configuration du client de session et contrat de chargement.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from ..access import DEFAULT_ADMIN_ROLE, DEFAULT_LANDING_PATH, DEFAULT_LOGIN_PATH, NavEntry
from ..network import TimeoutConfig, TimeoutManager
from ..session import AuthEndpoints

DEFAULT_API_URL = "http://127.0.0.1:8000/api"


# ══════════════════════════════════════════════════════════════════════════════
# TYPES
# ══════════════════════════════════════════════════════════════════════════════


class TimeoutSettings(BaseModel):
    """Timeouts HTTP en secondes (connexion ≤ 10, requête ≤ 30)."""

    connection: float = 10.0
    request: float = 30.0
    # Timeout de requête par chemin, ex: {"/auth/token/refresh/": 8}
    endpoints: Dict[str, float] = Field(default_factory=dict)

    def to_timeout_config(self) -> TimeoutConfig:
        return TimeoutConfig(connection_timeout=self.connection, request_timeout=self.request)

    def to_timeout_manager(self) -> TimeoutManager:
        """
        Raises:
            InvalidTimeoutError: Valeur hors bornes
            ValueError: Chemin vide
        """
        manager = TimeoutManager(self.to_timeout_config())
        for path, seconds in self.endpoints.items():
            manager.set_endpoint_timeout(
                path, TimeoutConfig(connection_timeout=self.connection, request_timeout=seconds)
            )
        return manager


class CredentialStoreSettings(BaseModel):
    """Stockage du couple de jetons."""

    backend: Literal["memory", "file"] = "memory"
    path: Optional[str] = None
    # Nom de la variable d'environnement portant la clé Fernet (jamais la clé elle-même)
    encryption_key_env: Optional[str] = "CONDOMINIO_SESSION_KEY"


class ClientConfig(BaseModel):
    """Configuration du client console."""

    api_base_url: str = DEFAULT_API_URL
    login_path: str = DEFAULT_LOGIN_PATH
    landing_path: str = DEFAULT_LANDING_PATH
    admin_role_name: str = DEFAULT_ADMIN_ROLE
    log_level: str = "INFO"
    timeouts: TimeoutSettings = Field(default_factory=TimeoutSettings)
    credential_store: CredentialStoreSettings = Field(default_factory=CredentialStoreSettings)
    endpoints: AuthEndpoints = Field(default_factory=AuthEndpoints)
    # Arbre de navigation YAML; relatif au fichier de config qui le déclare
    navigation_path: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════════
# INTERFACES
# ══════════════════════════════════════════════════════════════════════════════


class IConfigLoader(ABC):
    """Charge la configuration du client depuis YAML et l'environnement."""

    @abstractmethod
    def load(self, path: Optional[Union[str, Path]] = None) -> ClientConfig:
        """
        Charge et valide la configuration.

        Raises:
            ConfigError: Fichier absent, YAML invalide ou valeurs hors limites
        """
        pass

    @abstractmethod
    def load_navigation(self, path: Union[str, Path]) -> List[NavEntry]:
        """Charge un arbre de navigation YAML."""
        pass
