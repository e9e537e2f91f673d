"""
LOT 4: Session - Identity API Client

Client HTTP des endpoints d'authentification du backend:

    POST /auth/login/          {username, password} → {access, refresh, user}
    POST /auth/register/       {...}                → {user, tokens: {access, refresh}}
    POST /auth/token/refresh/  {refresh}            → {access[, refresh]}
    POST /auth/logout/         {refresh}            → 200/204
    GET  /auth/profile/        Bearer               → user

Ces appels ne passent pas par la passerelle: le gestionnaire de session
pilote lui-même le renouvellement.
"""

from typing import Any, Dict, Optional, Tuple

import httpx

from ..logging import StructuredLogger
from ..network import ITimeoutManager
from .errors import DEFAULT_ERROR_MESSAGE, IdentityApiError
from .interfaces import AuthEndpoints, Credential, IIdentityApi, Identity, RefreshResult

NETWORK_ERROR_MESSAGE = "No se pudo conectar con el servidor"
TIMEOUT_ERROR_MESSAGE = "El servidor no respondió a tiempo"
INVALID_RESPONSE_MESSAGE = "Respuesta inválida del servidor"


def extract_error_message(payload: Any, default: str = DEFAULT_ERROR_MESSAGE) -> str:
    """
    Extrait un message lisible d'un corps d'erreur backend.

    Ordre:
        1. payload["message"]
        2. payload["detail"]
        3. première erreur de champ: premier élément si liste, sinon la chaîne
        4. default

    Example:
        extract_error_message({"username": ["Este campo es requerido."]})
        # "Este campo es requerido."
    """
    if not isinstance(payload, dict) or not payload:
        if isinstance(payload, str) and payload.strip():
            return payload.strip()
        return default

    for key in ("message", "detail"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value

    first_error = next(iter(payload.values()))
    if isinstance(first_error, list) and first_error:
        return str(first_error[0])
    if isinstance(first_error, str) and first_error:
        return first_error

    return default


def _json_or_none(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


class IdentityApiClient(IIdentityApi):
    """
    Implémentation httpx de l'Identity API.

    Toute réponse non-2xx lève IdentityApiError(status, message lisible);
    timeouts et échecs de connexion lèvent IdentityApiError(None, ...).

    Example:
        api = IdentityApiClient(http_client)
        credential, identity = await api.login("admin", "secret")
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        endpoints: Optional[AuthEndpoints] = None,
        logger: Optional[StructuredLogger] = None,
        timeouts: Optional[ITimeoutManager] = None,
    ) -> None:
        """
        Args:
            http_client: Client partagé (URL de base, timeouts)
            endpoints: Chemins des endpoints (défaut: AuthEndpoints())
            logger: Logger structuré
            timeouts: Surcharges par chemin (défaut: timeouts du client)
        """
        self._client = http_client
        self._endpoints = endpoints or AuthEndpoints()
        self._logger = logger or StructuredLogger("identity-api")
        self._timeouts = timeouts

    @property
    def endpoints(self) -> AuthEndpoints:
        return self._endpoints

    async def _call(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        access_token: Optional[str] = None,
    ) -> Any:
        """
        Exécute un appel et retourne le corps JSON (None si vide).

        Raises:
            IdentityApiError: Statut >= 400, timeout ou échec transport
        """
        headers = {}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        timeout = (
            self._timeouts.as_httpx_timeout(path)
            if self._timeouts is not None
            else httpx.USE_CLIENT_DEFAULT
        )

        try:
            response = await self._client.request(
                method, path, json=json, headers=headers, timeout=timeout
            )
        except httpx.TimeoutException as e:
            self._logger.warn("Identity API timeout", method=method, path=path, error=str(e))
            raise IdentityApiError(None, TIMEOUT_ERROR_MESSAGE) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            # Tout échec hors statut HTTP (transport, corps indécodable)
            self._logger.warn(
                "Identity API unreachable",
                method=method,
                path=path,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise IdentityApiError(None, NETWORK_ERROR_MESSAGE) from e

        payload = _json_or_none(response)
        if response.status_code >= 400:
            message = extract_error_message(payload)
            self._logger.info(
                "Identity API rejected call",
                method=method,
                path=path,
                status_code=response.status_code,
                reason=message,
            )
            raise IdentityApiError(response.status_code, message, payload=payload)

        return payload

    def _parse_session(
        self, tokens: Any, user: Any, endpoint: str
    ) -> Tuple[Credential, Identity]:
        if not isinstance(tokens, dict):
            raise IdentityApiError(None, INVALID_RESPONSE_MESSAGE)
        try:
            credential = Credential(
                access_token=tokens.get("access") or "",
                refresh_token=tokens.get("refresh") or "",
            )
            identity = Identity.from_api(user)
        except ValueError as e:
            self._logger.error("Malformed Identity API response", endpoint=endpoint, error=str(e))
            raise IdentityApiError(None, INVALID_RESPONSE_MESSAGE) from e
        return credential, identity

    async def login(self, username: str, password: str) -> Tuple[Credential, Identity]:
        payload = await self._call(
            "POST", self._endpoints.login, json={"username": username, "password": password}
        )
        if not isinstance(payload, dict):
            raise IdentityApiError(None, INVALID_RESPONSE_MESSAGE)
        return self._parse_session(payload, payload.get("user"), "login")

    async def register(self, payload: Dict[str, Any]) -> Tuple[Credential, Identity]:
        response = await self._call("POST", self._endpoints.register, json=payload)
        if not isinstance(response, dict):
            raise IdentityApiError(None, INVALID_RESPONSE_MESSAGE)
        return self._parse_session(response.get("tokens"), response.get("user"), "register")

    async def refresh(self, refresh_token: str) -> RefreshResult:
        payload = await self._call(
            "POST", self._endpoints.refresh, json={"refresh": refresh_token}
        )
        if not isinstance(payload, dict) or not payload.get("access"):
            raise IdentityApiError(None, INVALID_RESPONSE_MESSAGE)
        return RefreshResult(
            access_token=payload["access"],
            refresh_token=payload.get("refresh") or None,
        )

    async def logout(self, refresh_token: str) -> None:
        await self._call("POST", self._endpoints.logout, json={"refresh": refresh_token})

    async def fetch_profile(self, access_token: str) -> Identity:
        payload = await self._call("GET", self._endpoints.profile, access_token=access_token)
        try:
            return Identity.from_api(payload)
        except ValueError as e:
            raise IdentityApiError(None, INVALID_RESPONSE_MESSAGE) from e
