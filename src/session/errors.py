"""
LOT 4: Session - Errors

Taxonomie des erreurs remontées par le cœur de session.

    AuthenticationError   login/inscription refusés (message lisible)
    SessionExpiredError   session morte: renouvellement échoué ou logout en vol
    IdentityApiError      réponse non-2xx ou échec transport vers l'Identity API

Les 400/403/5xx des requêtes applicatives ne sont jamais levées ici:
la passerelle les retourne telles quelles à l'écran appelant.
"""

from typing import Any, Optional

DEFAULT_ERROR_MESSAGE = "Ha ocurrido un error inesperado"


class SessionError(Exception):
    """Erreur de base du cœur de session."""

    pass


class AuthenticationError(SessionError):
    """Identifiants refusés ou serveur injoignable pendant le login."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class SessionExpiredError(SessionError):
    """
    Session morte.

    Erreur terminale unique: l'interface redirige vers le login,
    aucun écran n'implémente sa propre reprise.
    """

    def __init__(self, reason: str = "La sesión ha expirado") -> None:
        self.reason = reason
        super().__init__(reason)


class IdentityApiError(SessionError):
    """
    Échec d'un appel Identity API.

    Attributes:
        status_code: Statut HTTP, None pour timeout/échec de connexion
        message: Message lisible extrait de la réponse
        payload: Corps JSON de la réponse si disponible
    """

    def __init__(
        self,
        status_code: Optional[int],
        message: str,
        payload: Any = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.payload = payload
        super().__init__(f"[{status_code}] {message}" if status_code else message)

    @property
    def is_unauthorized(self) -> bool:
        """True si le serveur a rejeté le jeton (401)."""
        return self.status_code == 401

    @property
    def is_transport_failure(self) -> bool:
        """True si aucune réponse HTTP n'a été obtenue (timeout, connexion)."""
        return self.status_code is None
