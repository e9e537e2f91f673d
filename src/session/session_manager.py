"""
LOT 4: Session - Session Manager

Machine à états de la session authentifiée:

    UNAUTHENTICATED → AUTHENTICATING → AUTHENTICATED ⇄ RENEWING → DEAD

Règles:
    - Seul écrivain de l'état et du CredentialStore
    - Au plus un appel de renouvellement en vol: les demandeurs suivants
      s'attachent au même futur et reçoivent le même résultat
    - Échec du renouvellement → DEAD immédiat, stockage vidé, tous les
      demandeurs reçoivent SessionExpiredError en même temps
    - logout() efface la session avant tout await et invalide tout
      renouvellement en vol (compteur de génération)
"""

import asyncio
from typing import Any, Dict, List, Optional

from ..logging import StructuredLogger
from .errors import AuthenticationError, IdentityApiError, SessionExpiredError
from .interfaces import (
    Credential,
    ICredentialStore,
    IIdentityApi,
    ISessionManager,
    Identity,
    SessionStatus,
    StateListener,
)

SESSION_EXPIRED_MESSAGE = "La sesión ha expirado"
SESSION_CLOSED_MESSAGE = "La sesión fue cerrada"


class SessionManager(ISessionManager):
    """
    Gestionnaire de session côté client.

    Toute la synchronisation repose sur la boucle asyncio: le test
    "renouvellement en vol ?" et la prise du rôle d'initiateur sont
    faits sans await intermédiaire, donc sans verrou.

    Example:
        manager = SessionManager(FileCredentialStore(path), IdentityApiClient(client))
        await manager.restore_from_storage()
        identity = await manager.login("admin", "secret")
    """

    RENEWABLE_STATES = (SessionStatus.AUTHENTICATED, SessionStatus.AUTHENTICATING)

    def __init__(
        self,
        store: ICredentialStore,
        identity_api: IIdentityApi,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        """
        Args:
            store: Stockage durable du couple de jetons
            identity_api: Client des endpoints d'authentification
            logger: Logger structuré
        """
        self._store = store
        self._api = identity_api
        self._logger = logger or StructuredLogger("session")
        self._status = SessionStatus.UNAUTHENTICATED
        self._identity: Optional[Identity] = None
        self._credential: Optional[Credential] = None
        self._renewal: Optional["asyncio.Future[Credential]"] = None
        self._resume_status = SessionStatus.AUTHENTICATED
        self._generation = 0
        self._listeners: List[StateListener] = []

    # ------------------------------------------------------------------
    # Observateurs synchrones
    # ------------------------------------------------------------------

    def current_state(self) -> SessionStatus:
        return self._status

    def current_identity(self) -> Optional[Identity]:
        return self._identity

    def current_credential(self) -> Optional[Credential]:
        return self._credential

    def session_generation(self) -> int:
        """Change à chaque ouverture ou fermeture de session, pas au renouvellement."""
        return self._generation

    @property
    def is_loading(self) -> bool:
        """True tant que la restauration au démarrage n'a pas abouti."""
        if self._status == SessionStatus.AUTHENTICATING:
            return True
        return self._status == SessionStatus.RENEWING and self._identity is None

    @property
    def is_authenticated(self) -> bool:
        return (
            self._status in (SessionStatus.AUTHENTICATED, SessionStatus.RENEWING)
            and self._identity is not None
        )

    @property
    def renewal_in_flight(self) -> bool:
        return self._renewal is not None

    def add_state_listener(self, listener: StateListener) -> None:
        """Abonne un écouteur notifié à chaque transition (status, identité)."""
        self._listeners.append(listener)

    def remove_state_listener(self, listener: StateListener) -> bool:
        if listener in self._listeners:
            self._listeners.remove(listener)
            return True
        return False

    # ------------------------------------------------------------------
    # Établissement / fermeture
    # ------------------------------------------------------------------

    async def login(self, username: str, password: str) -> Identity:
        """
        Authentifie via l'Identity API et établit la session.

        Returns:
            Identité de l'utilisateur

        Raises:
            AuthenticationError: Identifiants refusés, serveur injoignable
                ou login annulé par un logout concurrent
        """
        if not username or not username.strip() or not password:
            raise AuthenticationError("Usuario y contraseña son obligatorios")

        generation = self._generation
        try:
            credential, identity = await self._api.login(username.strip(), password)
        except IdentityApiError as e:
            self._logger.info(
                "Login rejected", username=username, status_code=e.status_code, reason=e.message
            )
            raise AuthenticationError(e.message, status_code=e.status_code) from e

        if generation != self._generation:
            raise AuthenticationError("Inicio de sesión cancelado")

        self._establish(credential, identity)
        self._logger.info("Login succeeded", username=identity.username, role=identity.role_name)
        return identity

    async def register(self, payload: Dict[str, Any]) -> Identity:
        """
        Crée un compte et établit la session avec les jetons retournés.

        Raises:
            AuthenticationError: Inscription refusée (message du premier champ en erreur)
        """
        generation = self._generation
        try:
            credential, identity = await self._api.register(payload)
        except IdentityApiError as e:
            self._logger.info("Registration rejected", status_code=e.status_code, reason=e.message)
            raise AuthenticationError(e.message, status_code=e.status_code) from e

        if generation != self._generation:
            raise AuthenticationError("Registro cancelado")

        self._establish(credential, identity)
        self._logger.info("Registration succeeded", username=identity.username)
        return identity

    async def logout(self) -> None:
        """
        Efface la session puis notifie le serveur (best-effort).

        Tout renouvellement en vol est invalidé immédiatement: ses
        demandeurs reçoivent SessionExpiredError et rien n'est persisté.
        """
        credential = self._credential or self._store.load()
        # État effacé avant tout await: un 401 pendant la notification ne
        # peut plus relancer de renouvellement
        self._renewal = None
        self._reset(SessionStatus.UNAUTHENTICATED)
        self._logger.info("Logged out")

        if credential is not None:
            try:
                await self._api.logout(credential.refresh_token)
            except IdentityApiError as e:
                self._logger.debug("Logout notification failed", reason=e.message)

    async def restore_from_storage(self) -> Optional[Identity]:
        """
        Restaure la session au démarrage.

        Processus:
            1. Aucun couple stocké → UNAUTHENTICATED
            2. AUTHENTICATING, lecture du profil avec l'access token
            3. 401 → renouvellement (dédupliqué) puis nouvelle lecture du profil
            4. Tout échec → stockage vidé, UNAUTHENTICATED

        Returns:
            Identité restaurée ou None
        """
        credential = self._store.load()
        if credential is None:
            return None

        generation = self._generation
        self._credential = credential
        self._set_status(SessionStatus.AUTHENTICATING)

        try:
            identity = await self._fetch_profile_with_renewal()
        except (IdentityApiError, SessionExpiredError) as e:
            if generation == self._generation or self._status == SessionStatus.DEAD:
                self._logger.info("Stored session rejected", reason=str(e))
                self._reset(SessionStatus.UNAUTHENTICATED)
            return None

        if generation != self._generation:
            # logout() ou login() pendant la restauration
            return None

        self._identity = identity
        self._logger.set_default_condominium(_as_str(identity.condominium_id))
        self._set_status(SessionStatus.AUTHENTICATED)
        self._logger.info("Session restored", username=identity.username)
        return identity

    async def _fetch_profile_with_renewal(self) -> Identity:
        credential = self._credential
        if credential is None:
            raise SessionExpiredError(SESSION_CLOSED_MESSAGE)
        try:
            return await self._api.fetch_profile(credential.access_token)
        except IdentityApiError as e:
            if not e.is_unauthorized:
                raise
        renewed = await self.renew()
        return await self._api.fetch_profile(renewed.access_token)

    # ------------------------------------------------------------------
    # Renouvellement dédupliqué
    # ------------------------------------------------------------------

    async def renew(self) -> Credential:
        """
        Renouvelle l'access token.

        Le premier appelant passe la session en RENEWING et lance l'unique
        appel réseau; les suivants s'attachent au même futur. L'annulation
        d'un appelant n'annule pas le renouvellement partagé.

        Returns:
            Nouveau Credential (identique pour tous les appelants)

        Raises:
            SessionExpiredError: Renouvellement échoué, session fermée
                pendant le vol, ou aucune session à renouveler
        """
        # Pas d'await entre le test et l'affectation de self._renewal
        if self._renewal is None:
            if self._status not in self.RENEWABLE_STATES or self._credential is None:
                raise SessionExpiredError(SESSION_EXPIRED_MESSAGE)
            self._resume_status = self._status
            self._set_status(SessionStatus.RENEWING)
            self._renewal = asyncio.ensure_future(
                self._run_renewal(self._credential, self._generation)
            )
            self._logger.info("Renewal started")
        else:
            self._logger.debug("Joined in-flight renewal")

        return await asyncio.shield(self._renewal)

    async def _run_renewal(self, credential: Credential, generation: int) -> Credential:
        try:
            result = await self._api.refresh(credential.refresh_token)
        except IdentityApiError as e:
            self._renewal_failed(generation, f"renewal failed: {e.message}")
            raise SessionExpiredError(SESSION_EXPIRED_MESSAGE) from e
        except Exception as e:
            self._logger.error("Renewal crashed", error_type=type(e).__name__, error=str(e))
            self._renewal_failed(generation, f"renewal crashed: {type(e).__name__}")
            raise SessionExpiredError(SESSION_EXPIRED_MESSAGE) from e

        if generation != self._generation:
            self._logger.info("Renewal outcome discarded, session closed meanwhile")
            raise SessionExpiredError(SESSION_CLOSED_MESSAGE)

        renewed = Credential(
            access_token=result.access_token,
            refresh_token=result.refresh_token or credential.refresh_token,
        )
        self._store.save(renewed)
        self._credential = renewed
        self._renewal = None
        self._set_status(self._resume_status)
        self._logger.info("Renewal succeeded", rotated_refresh=result.refresh_token is not None)
        return renewed

    def _renewal_failed(self, generation: int, reason: str) -> None:
        if generation == self._generation:
            self._renewal = None
            self._kill(reason)

    # ------------------------------------------------------------------
    # Chemins terminaux et mutations
    # ------------------------------------------------------------------

    def expire(self, reason: str, credential: Optional[Credential] = None) -> None:
        """
        Chemin terminal utilisé par la passerelle.

        Sans effet si la session est déjà UNAUTHENTICATED ou DEAD, ou si
        `credential` (le couple utilisé par la requête en échec) n'est plus
        le couple courant: une nouvelle session a été ouverte entre-temps.
        """
        if self._status in (SessionStatus.UNAUTHENTICATED, SessionStatus.DEAD):
            return
        if credential is not None and credential != self._credential:
            return
        self._renewal = None
        self._kill(reason)

    def replace_identity(self, identity: Identity) -> None:
        """
        Remplace l'identité sur signal serveur (profil mis à jour).

        Raises:
            SessionExpiredError: Aucune session authentifiée
        """
        if not self.is_authenticated:
            raise SessionExpiredError(SESSION_EXPIRED_MESSAGE)
        self._identity = identity
        self._logger.set_default_condominium(_as_str(identity.condominium_id))
        self._notify()

    def _establish(self, credential: Credential, identity: Identity) -> None:
        # Nouvelle instance de session: tout renouvellement antérieur est caduc
        self._generation += 1
        self._renewal = None
        self._store.save(credential)
        self._credential = credential
        self._identity = identity
        self._logger.set_default_condominium(_as_str(identity.condominium_id))
        self._set_status(SessionStatus.AUTHENTICATED)

    def _kill(self, reason: str) -> None:
        self._logger.warn("Session dead", reason=reason)
        self._reset(SessionStatus.DEAD)

    def _reset(self, status: SessionStatus) -> None:
        # Fin de l'instance de session: renouvellements et restaurations en vol caducs
        self._generation += 1
        self._store.clear()
        self._credential = None
        self._identity = None
        self._logger.set_default_condominium(None)
        self._set_status(status)

    def _set_status(self, status: SessionStatus) -> None:
        previous = self._status
        self._status = status
        if previous != status:
            self._logger.debug(
                "Session transition", previous=previous.value, current=status.value
            )
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._status, self._identity)
            except Exception as e:
                self._logger.error("Session listener failed", error=str(e))


def _as_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)
