"""
LOT 2: Logging - Structured Logger

Lignes JSON émises par la session, la passerelle et le client Identity
API. Chaque ligne porte un correlation_id; le condominium_id n'apparaît
qu'une fois l'identité connue.
"""

import uuid
from abc import ABC, abstractmethod
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, List, Optional

from .interfaces import (
    IStructuredLogger,
    ISensitiveMasker,
    LogConfig,
    LogEntry,
    LogLevel,
)
from .sensitive_masker import SensitiveMasker


class MissingRequiredFieldError(Exception):
    """Champ obligatoire absent d'une entrée."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"Log entry without {field_name}")


class InvalidLogLevelError(Exception):
    """Nom de niveau inconnu."""

    def __init__(self, level: str) -> None:
        self.level = level
        super().__init__(f"Unknown log level {level!r}")


_LEVEL_ALIASES = {"WARNING": "WARN"}


def parse_log_level(name: str) -> LogLevel:
    """
    Niveau depuis son nom dans console.yaml ("debug", "Warning", ...).

    Raises:
        InvalidLogLevelError: Nom inconnu
    """
    key = (name or "").strip().upper()
    try:
        return LogLevel(_LEVEL_ALIASES.get(key, key))
    except ValueError:
        raise InvalidLogLevelError(name) from None


def utc_timestamp() -> str:
    """Horodatage 2024-12-04T14:30:00.123Z."""
    now = datetime.now(timezone.utc)
    return f"{now:%Y-%m-%dT%H:%M:%S}.{now.microsecond // 1000:03d}Z"


class _LevelShortcuts(ABC):
    """debug() ... critical() au-dessus de log()."""

    @abstractmethod
    def log(self, level: LogLevel, message: str, **extra: Any) -> Optional[LogEntry]:
        pass

    def debug(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.DEBUG, message, **extra)

    def info(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.INFO, message, **extra)

    def warn(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.WARN, message, **extra)

    def error(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.ERROR, message, **extra)

    def critical(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.CRITICAL, message, **extra)


class StructuredLogger(_LevelShortcuts, IStructuredLogger):
    """
    Logger JSON d'un composant du client.

    Les champs extra passent par le masker avant d'être conservés: un
    jeton ou un mot de passe ne se retrouve ni dans le tampon ni dans la
    sortie. Le tampon garde les `max_entries` dernières entrées pour les
    tests et le diagnostic.

    Example:
        logger = StructuredLogger("session")
        logger.set_default_condominium("12")
        logger.info("Session established", username="admin")
    """

    def __init__(
        self,
        name: str,
        config: Optional[LogConfig] = None,
        masker: Optional[ISensitiveMasker] = None,
        output_handler: Optional[Callable[[str], None]] = None,
    ) -> None:
        """
        Args:
            name: Composant émetteur ("session", "gateway", ...)
            config: Niveau minimal, masquage, taille du tampon
            masker: Défaut SensitiveMasker()
            output_handler: Reçoit chaque ligne JSON (ex: print)

        Raises:
            ValueError: name vide
        """
        if not name or not name.strip():
            raise ValueError("Logger name cannot be empty")

        self._name = name.strip()
        self._config = config or LogConfig()
        self._masker = masker or SensitiveMasker()
        self._sink = output_handler
        self._entries: Deque[LogEntry] = deque(maxlen=max(1, self._config.max_entries))
        self._condominium_id = self._config.default_condominium_id
        self._correlation_id = self._config.default_correlation_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def config(self) -> LogConfig:
        return self._config

    def set_default_condominium(self, condominium_id: Optional[str]) -> None:
        """Condominio de l'identité courante; None à la déconnexion."""
        self._condominium_id = condominium_id

    def set_default_correlation(self, correlation_id: str) -> None:
        self._correlation_id = correlation_id

    def clear_defaults(self) -> None:
        self._condominium_id = None
        self._correlation_id = None

    def log(
        self,
        level: LogLevel,
        message: str,
        correlation_id: Optional[str] = None,
        condominium_id: Optional[str] = None,
        **extra: Any,
    ) -> Optional[LogEntry]:
        """
        Enregistre une entrée puis la transmet à l'output handler.

        Une entrée sous le niveau minimal est ignorée sans validation.

        Returns:
            L'entrée, ou None si filtrée

        Raises:
            MissingRequiredFieldError: message vide
        """
        if LogLevel.get_priority(level) < LogLevel.get_priority(self._config.min_level):
            return None
        if not message:
            raise MissingRequiredFieldError("message")

        entry = LogEntry(
            timestamp=utc_timestamp(),
            level=level,
            correlation_id=correlation_id or self._correlation_id or str(uuid.uuid4()),
            message=message,
            condominium_id=condominium_id or self._condominium_id,
            extra=self._prepare_extra(extra),
            logger_name=self._name,
        )
        self._entries.append(entry)
        if self._sink is not None:
            self._sink(entry.to_json())
        return entry

    def _prepare_extra(self, extra: Dict[str, Any]) -> Dict[str, Any]:
        if not extra or not self._config.include_extra:
            return {}
        if self._config.mask_sensitive:
            return self._masker.mask(dict(extra))
        return dict(extra)

    def get_entries(self) -> List[LogEntry]:
        return list(self._entries)

    def clear_entries(self) -> None:
        self._entries.clear()

    def get_entries_by_level(self, level: LogLevel) -> List[LogEntry]:
        return [entry for entry in self._entries if entry.level == level]

    def get_entries_by_message(self, message: str) -> List[LogEntry]:
        return [entry for entry in self._entries if entry.message == message]

    def with_context(
        self,
        correlation_id: Optional[str] = None,
        condominium_id: Optional[str] = None,
    ) -> "ContextualLogger":
        """
        Logger lié à une requête: envoi, 401, renouvellement et rejeu
        partagent le même correlation_id.
        """
        return ContextualLogger(
            self,
            correlation_id=correlation_id or str(uuid.uuid4()),
            condominium_id=condominium_id or self._condominium_id,
        )


class ContextualLogger(_LevelShortcuts):
    """Vue d'un StructuredLogger avec correlation_id et condominium_id fixés."""

    def __init__(
        self,
        logger: StructuredLogger,
        correlation_id: Optional[str] = None,
        condominium_id: Optional[str] = None,
    ) -> None:
        self._logger = logger
        self._correlation_id = correlation_id
        self._condominium_id = condominium_id

    @property
    def correlation_id(self) -> Optional[str]:
        return self._correlation_id

    def log(self, level: LogLevel, message: str, **extra: Any) -> Optional[LogEntry]:
        return self._logger.log(
            level,
            message,
            correlation_id=self._correlation_id,
            condominium_id=self._condominium_id,
            **extra,
        )
