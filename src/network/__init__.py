"""
LOT 3: Network

Transport HTTP du client de session:
- Timeouts connexion/requête bornés (10s / 30s), surchargeables par endpoint
- Client httpx.AsyncClient unique partagé par l'Identity API et la passerelle
"""

from .interfaces import (
    # Enums
    TimeoutType,
    # Data classes
    TimeoutConfig,
    # Interfaces
    ITimeoutManager,
)
from .timeout_manager import (
    TimeoutManager,
    InvalidTimeoutError,
)
from .http_client import (
    DEFAULT_HEADERS,
    create_http_client,
)

__all__ = [
    # Enums
    "TimeoutType",
    # Data classes
    "TimeoutConfig",
    # Interfaces
    "ITimeoutManager",
    # Implementations
    "TimeoutManager",
    "create_http_client",
    "DEFAULT_HEADERS",
    # Exceptions
    "InvalidTimeoutError",
]
