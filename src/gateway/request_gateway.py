"""
LOT 5: Gateway - Request Gateway

Point de passage unique de toutes les requêtes applicatives vers le backend.

Règles:
    - Bearer courant attaché à chaque requête
    - 401 sur une requête porteuse d'un jeton → un renouvellement partagé,
      puis un seul renvoi; un second 401 est retourné tel quel
    - 403 (authentifié mais interdit), 400, 5xx → retournés tels quels
    - Renouvellement échoué → chemin terminal de la session, SessionExpiredError
"""

from typing import Any, Optional

import httpx

from ..logging import ContextualLogger, StructuredLogger
from ..session import (
    Credential,
    ISessionManager,
    SessionExpiredError,
    SessionStatus,
)

UNAUTHORIZED = 401
SESSION_CLOSED_MESSAGE = "La sesión fue cerrada"


class GatewayTransportError(Exception):
    """Échec transport (timeout, connexion, corps indécodable) sur une requête applicative."""

    def __init__(self, request: httpx.Request, cause: Exception) -> None:
        self.request = request
        self.cause = cause
        super().__init__(f"{request.method} {request.url.path} failed: {cause}")


class RequestGateway:
    """
    Passerelle authentifiée au-dessus du httpx.AsyncClient partagé.

    La passerelle ne modifie jamais l'état de session: elle demande au
    gestionnaire de renouveler ou d'expirer et réagit au résultat.

    Example:
        gateway = RequestGateway(http_client, session_manager)
        response = await gateway.get("/units/", params={"page": 1})
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        session: ISessionManager,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        """
        Args:
            http_client: Client partagé (URL de base, timeouts)
            session: Gestionnaire de session (source du jeton)
            logger: Logger structuré
        """
        self._client = http_client
        self._session = session
        self._logger = logger or StructuredLogger("gateway")

    async def send(self, request: httpx.Request) -> httpx.Response:
        """
        Envoie une requête avec renouvellement-et-rejeu sur 401.

        Returns:
            Réponse du backend (y compris 400/403/5xx et 401 après rejeu)

        Raises:
            SessionExpiredError: Renouvellement impossible ou session fermée
            GatewayTransportError: Timeout ou échec de connexion
        """
        log = self._logger.with_context()
        credential = self._session.current_credential()
        generation = self._session.session_generation()
        response = await self._dispatch(request, credential, log)

        if response.status_code != UNAUTHORIZED or credential is None:
            return response

        log.info("Credential rejected", method=request.method, path=request.url.path)
        fresh = await self._renewed_credential(credential, generation, log)

        log.debug("Replaying request", method=request.method, path=request.url.path)
        replay = await self._dispatch(request, fresh, log)
        if replay.status_code == UNAUTHORIZED:
            log.warn(
                "Credential rejected after renewal",
                method=request.method,
                path=request.url.path,
            )
        return replay

    async def _renewed_credential(
        self, rejected: Credential, generation: int, log: ContextualLogger
    ) -> Credential:
        if self._session.session_generation() != generation:
            # Session fermée ou remplacée pendant le vol: jamais rejouée sous
            # un autre couple que celui de sa propre session
            log.info("Session replaced during request, not replayed")
            raise SessionExpiredError(SESSION_CLOSED_MESSAGE)

        current = self._session.current_credential()
        if (
            current is not None
            and current != rejected
            and self._session.current_state() == SessionStatus.AUTHENTICATED
        ):
            # Déjà renouvelé pendant le vol de cette requête
            return current

        try:
            fresh = await self._session.renew()
        except SessionExpiredError as e:
            log.warn("Session dead, request evicted", reason=e.reason)
            self._session.expire(e.reason, credential=rejected)
            raise

        # Un logout ou un nouveau login a pu survenir entre la résolution et la reprise
        if (
            self._session.session_generation() != generation
            or self._session.current_state()
            not in (SessionStatus.AUTHENTICATED, SessionStatus.RENEWING)
            or self._session.current_credential() is None
        ):
            raise SessionExpiredError(SESSION_CLOSED_MESSAGE)
        return fresh

    async def _dispatch(
        self,
        request: httpx.Request,
        credential: Optional[Credential],
        log: ContextualLogger,
    ) -> httpx.Response:
        prepared = self._prepare(request, credential)
        try:
            return await self._client.send(prepared)
        except httpx.RequestError as e:
            log.warn(
                "Request transport failure",
                method=request.method,
                path=request.url.path,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise GatewayTransportError(request, e) from e

    @staticmethod
    def _prepare(
        request: httpx.Request, credential: Optional[Credential]
    ) -> httpx.Request:
        """Copie la requête avec l'en-tête Authorization du couple donné."""
        headers = httpx.Headers(request.headers)
        if credential is not None:
            headers["Authorization"] = credential.authorization_header
        return httpx.Request(
            request.method,
            request.url,
            headers=headers,
            content=request.read(),
            extensions=dict(request.extensions),
        )

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Construit la requête via le client partagé puis l'envoie."""
        return await self.send(self._client.build_request(method, url, **kwargs))

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", url, **kwargs)

    async def patch(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", url, **kwargs)
