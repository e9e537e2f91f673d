"""
LOT 3: Network - Timeout Manager

Timeouts HTTP bornés, par défaut ou par chemin d'endpoint, convertis en
httpx.Timeout pour le client partagé et les appels Identity API.
"""

from typing import Dict, Optional

import httpx

from .interfaces import ITimeoutManager, TimeoutConfig, TimeoutType


class InvalidTimeoutError(Exception):
    """Valeur de timeout nulle, négative ou au-delà de sa borne."""

    pass


class TimeoutManager(ITimeoutManager):
    """
    Timeouts du client console.

    Bornes:
        connexion 10s, requête 30s, lecture/écriture 60s

    Example:
        timeouts = TimeoutManager(TimeoutConfig(request_timeout=20.0))
        timeouts.set_endpoint_timeout("/auth/token/refresh/", TimeoutConfig(request_timeout=8.0))
        client_timeout = timeouts.as_httpx_timeout()
    """

    LIMITS: Dict[TimeoutType, float] = {
        TimeoutType.CONNECTION: 10.0,
        TimeoutType.REQUEST: 30.0,
        TimeoutType.READ: 60.0,
        TimeoutType.WRITE: 60.0,
    }

    def __init__(self, default_config: Optional[TimeoutConfig] = None) -> None:
        """
        Raises:
            InvalidTimeoutError: default_config hors bornes
        """
        self._check(default_config or TimeoutConfig())
        self._default = default_config or TimeoutConfig()
        self._overrides: Dict[str, TimeoutConfig] = {}

    @property
    def default_config(self) -> TimeoutConfig:
        return self._default

    @property
    def endpoints(self) -> Dict[str, TimeoutConfig]:
        """Surcharges par chemin (copie)."""
        return dict(self._overrides)

    def _check(self, config: TimeoutConfig) -> None:
        values = {
            TimeoutType.CONNECTION: config.connection_timeout,
            TimeoutType.REQUEST: config.request_timeout,
            TimeoutType.READ: config.read_timeout,
            TimeoutType.WRITE: config.write_timeout,
        }
        for timeout_type, value in values.items():
            # READ / WRITE non fixés: hérités de la requête
            if value is None:
                continue
            if not self.validate_timeout(timeout_type, value):
                raise InvalidTimeoutError(
                    f"{timeout_type.value} timeout {value}s outside "
                    f"(0, {self.LIMITS[timeout_type]}s]"
                )

    def _resolve(self, endpoint: Optional[str]) -> TimeoutConfig:
        return self._overrides.get(endpoint or "", self._default)

    def get_timeout(
        self, timeout_type: TimeoutType, endpoint: Optional[str] = None
    ) -> float:
        config = self._resolve(endpoint)
        if timeout_type == TimeoutType.CONNECTION:
            return config.connection_timeout
        if timeout_type == TimeoutType.READ:
            return config.read_timeout or config.request_timeout
        if timeout_type == TimeoutType.WRITE:
            return config.write_timeout or config.request_timeout
        return config.request_timeout

    def set_endpoint_timeout(self, endpoint: str, config: TimeoutConfig) -> None:
        """
        Surcharge les timeouts d'un chemin (ex: "/auth/token/refresh/").

        Raises:
            ValueError: Chemin vide
            InvalidTimeoutError: Valeurs hors bornes
        """
        if not endpoint or not endpoint.strip():
            raise ValueError("endpoint cannot be empty")
        self._check(config)
        self._overrides[endpoint.strip()] = config

    def clear_endpoint_timeout(self, endpoint: str) -> bool:
        return self._overrides.pop(endpoint, None) is not None

    def validate_timeout(self, timeout_type: TimeoutType, value: float) -> bool:
        limit = self.LIMITS.get(timeout_type)
        return limit is not None and 0 < value <= limit

    def as_httpx_timeout(self, endpoint: Optional[str] = None) -> httpx.Timeout:
        """
        Mapping:
            connect ← connexion
            read    ← lecture, sinon requête
            write   ← écriture, sinon requête
            pool    ← requête
        """
        return httpx.Timeout(
            connect=self.get_timeout(TimeoutType.CONNECTION, endpoint),
            read=self.get_timeout(TimeoutType.READ, endpoint),
            write=self.get_timeout(TimeoutType.WRITE, endpoint),
            pool=self.get_timeout(TimeoutType.REQUEST, endpoint),
        )
