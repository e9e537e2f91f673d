"""
LOT 2: Logging - Interfaces

Une entrée = une ligne JSON:
    {"timestamp", "level", "correlation_id", "message"[, "condominium_id",
     "logger", "extra"]}

Jetons, mots de passe et en-têtes Authorization n'y figurent jamais en clair.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class LogLevel(Enum):
    """DEBUG < INFO < WARN < ERROR < CRITICAL"""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @classmethod
    def get_priority(cls, level: "LogLevel") -> int:
        return list(cls).index(level)


@dataclass
class LogEntry:
    timestamp: str
    level: LogLevel
    correlation_id: str
    message: str
    condominium_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)
    logger_name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Champs optionnels omis tant qu'ils sont vides."""
        payload: Dict[str, Any] = {
            "timestamp": self.timestamp,
            "level": self.level.value,
            "correlation_id": self.correlation_id,
            "message": self.message,
        }
        optional = {
            "condominium_id": self.condominium_id,
            "logger": self.logger_name or None,
            "extra": self.extra or None,
        }
        payload.update((k, v) for k, v in optional.items() if v is not None)
        return payload

    def to_json(self) -> str:
        # Accents conservés: messages d'erreur du backend en espagnol
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)


@dataclass
class LogConfig:
    min_level: LogLevel = LogLevel.INFO
    include_extra: bool = True
    mask_sensitive: bool = True
    max_entries: int = 1000
    default_condominium_id: Optional[str] = None
    default_correlation_id: Optional[str] = None


class IStructuredLogger(ABC):
    """Logger JSON d'un composant du client."""

    @abstractmethod
    def log(
        self,
        level: LogLevel,
        message: str,
        correlation_id: Optional[str] = None,
        condominium_id: Optional[str] = None,
        **extra: Any,
    ) -> Optional[LogEntry]:
        """
        Returns:
            L'entrée créée, None si sous le niveau minimal
        """

    @abstractmethod
    def debug(self, message: str, **extra: Any) -> Optional[LogEntry]: ...

    @abstractmethod
    def info(self, message: str, **extra: Any) -> Optional[LogEntry]: ...

    @abstractmethod
    def warn(self, message: str, **extra: Any) -> Optional[LogEntry]: ...

    @abstractmethod
    def error(self, message: str, **extra: Any) -> Optional[LogEntry]: ...

    @abstractmethod
    def critical(self, message: str, **extra: Any) -> Optional[LogEntry]: ...

    @abstractmethod
    def get_entries(self) -> List[LogEntry]:
        """Entrées conservées dans le tampon."""


class ISensitiveMasker(ABC):
    """Masquage des secrets avant écriture d'une entrée."""

    # Fragments de clé, comparés en minuscules
    SENSITIVE_PATTERNS: List[str] = [
        "password",
        "passwd",
        "pwd",
        "token",
        "secret",
        "api_key",
        "apikey",
        "credential",
        "authorization",
        "bearer",
        "cookie",
        "fernet",
        "encryption_key",
    ]

    # Noms exacts du couple de jetons Identity API
    EXACT_SENSITIVE_KEYS: List[str] = ["access", "refresh"]

    MASK_VALUE: str = "***MASKED***"

    @abstractmethod
    def mask(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Copie de data, secrets remplacés par MASK_VALUE."""

    @abstractmethod
    def mask_string(self, value: str) -> str: ...

    @abstractmethod
    def is_sensitive_key(self, key: str) -> bool: ...

    @abstractmethod
    def add_pattern(self, pattern: str) -> None: ...
