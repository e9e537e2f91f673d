"""
LOT 2: Logging

Logging structuré JSON du client de session:
- Entrées JSON avec timestamp ISO 8601 UTC et correlation_id
- Niveaux DEBUG, INFO, WARN, ERROR, CRITICAL
- Jetons, mots de passe et en-têtes Authorization masqués
"""

from .interfaces import (
    # Enums
    LogLevel,
    # Dataclasses
    LogEntry,
    LogConfig,
    # Interfaces
    IStructuredLogger,
    ISensitiveMasker,
)
from .sensitive_masker import (
    SensitiveMasker,
)
from .structured_logger import (
    StructuredLogger,
    ContextualLogger,
    parse_log_level,
    # Exceptions
    MissingRequiredFieldError,
    InvalidLogLevelError,
)

__all__ = [
    # Enums
    "LogLevel",
    # Dataclasses
    "LogEntry",
    "LogConfig",
    # Interfaces
    "IStructuredLogger",
    "ISensitiveMasker",
    # Implementations
    "SensitiveMasker",
    "StructuredLogger",
    "ContextualLogger",
    "parse_log_level",
    # Exceptions
    "MissingRequiredFieldError",
    "InvalidLogLevelError",
]
