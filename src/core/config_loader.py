"""
CONDOMINIO Console - Config Loader Implementation
Charge la configuration YAML du client et applique les surcharges d'environnement.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml
from pydantic import ValidationError

from ..access import NavEntry
from ..logging import InvalidLogLevelError, parse_log_level
from ..network import InvalidTimeoutError
from .interfaces import ClientConfig, IConfigLoader

API_URL_ENV = "CONDOMINIO_API_URL"


class ConfigError(Exception):
    """Erreur de configuration."""

    pass


class ConfigLoader(IConfigLoader):
    """
    Chargement de la configuration depuis fichiers YAML.

    Example:
        config = ConfigLoader().load("config/console.yaml")
    """

    def __init__(self, env: Optional[Mapping[str, str]] = None):
        """
        Args:
            env: Environnement (défaut: os.environ)
        """
        self._env = os.environ if env is None else env

    def load(self, path: Optional[Union[str, Path]] = None) -> ClientConfig:
        """
        Charge la config du client.

        Sans chemin, retourne les valeurs par défaut (+ environnement).

        Raises:
            ConfigError: Fichier inexistant, YAML invalide ou valeurs invalides
        """
        data: Dict[str, Any] = {}
        if path is not None:
            data = self._read_mapping(Path(path))
            navigation = data.get("navigation_path")
            if isinstance(navigation, str) and navigation:
                data["navigation_path"] = str(_resolve_beside(Path(path), navigation))

        api_url = self._env.get(API_URL_ENV)
        if api_url:
            data["api_base_url"] = api_url

        try:
            config = ClientConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Configuration invalide: {e}") from e

        self._validate_limits(config)
        return config

    def load_navigation(self, path: Union[str, Path]) -> List[NavEntry]:
        """
        Charge l'arbre de navigation.

        Format attendu:
            navigation:
              - label: Inicio
                path: /dashboard
              - label: Gestión Acceso
                required_role: Administrador
                children: [...]

        Raises:
            ConfigError: Fichier absent ou structure invalide
        """
        data = self._read_mapping(Path(path))
        entries = data.get("navigation")
        if not isinstance(entries, list):
            raise ConfigError("navigation doit être une liste")
        try:
            return [NavEntry.from_dict(entry) for entry in entries]
        except ValueError as e:
            raise ConfigError(f"Entrée de navigation invalide: {e}") from e

    def _read_mapping(self, config_file: Path) -> Dict[str, Any]:
        if not config_file.exists():
            raise ConfigError(f"Configuration non trouvée: {config_file}")

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Erreur de parsing YAML: {e}") from e
        except OSError as e:
            raise ConfigError(f"Erreur de lecture fichier: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError("Configuration doit être un objet YAML")
        return data

    def _validate_limits(self, config: ClientConfig) -> None:
        """Valide timeouts, niveau de log et stockage."""
        try:
            config.timeouts.to_timeout_manager()
        except (InvalidTimeoutError, ValueError) as e:
            raise ConfigError(str(e)) from e

        try:
            parse_log_level(config.log_level)
        except InvalidLogLevelError as e:
            raise ConfigError(str(e)) from e

        store = config.credential_store
        if store.backend == "file" and not store.path:
            raise ConfigError("credential_store.path obligatoire pour le backend file")


def _resolve_beside(config_file: Path, target: str) -> Path:
    """Chemin relatif résolu depuis le dossier du fichier de config."""
    candidate = Path(target).expanduser()
    if candidate.is_absolute():
        return candidate
    return config_file.parent / candidate
