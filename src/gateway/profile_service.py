"""
LOT 5: Gateway - Profile Service

Opérations authentifiées sur le profil courant, acheminées par la passerelle
(donc soumises au renouvellement-et-rejeu), qui répercutent toute nouvelle
identité dans le gestionnaire de session.
"""

from typing import Any, Dict, Optional

import httpx

from ..session import AuthEndpoints, Identity, SessionManager, extract_error_message
from .request_gateway import RequestGateway


class ProfileServiceError(Exception):
    """
    Réponse non-2xx sur une opération de profil.

    Attributes:
        status_code: Statut HTTP (400 validation, 403 interdit, ...)
        message: Message lisible pour affichage dans le formulaire
        payload: Corps JSON (erreurs par champ)
    """

    def __init__(self, status_code: int, message: str, payload: Any = None) -> None:
        self.status_code = status_code
        self.message = message
        self.payload = payload
        super().__init__(f"[{status_code}] {message}")


class ProfileService:
    """
    Profil de l'utilisateur connecté.

    Example:
        profiles = ProfileService(gateway, session_manager)
        identity = await profiles.update_profile({"telefono": "70000000"})
    """

    def __init__(
        self,
        gateway: RequestGateway,
        session: SessionManager,
        endpoints: Optional[AuthEndpoints] = None,
    ) -> None:
        self._gateway = gateway
        self._session = session
        self._endpoints = endpoints or AuthEndpoints()

    async def refresh_identity(self) -> Identity:
        """Relit le profil serveur et remplace l'identité de session."""
        response = await self._gateway.get(self._endpoints.profile)
        return self._apply_identity(response)

    async def update_profile(self, changes: Dict[str, Any]) -> Identity:
        """
        PATCH du profil.

        Raises:
            ProfileServiceError: Validation refusée (400) ou autre non-2xx
        """
        response = await self._gateway.patch(self._endpoints.profile_update, json=changes)
        return self._apply_identity(response)

    async def change_password(self, old_password: str, new_password: str) -> None:
        """
        Change le mot de passe; la session courante reste valide.

        Raises:
            ProfileServiceError: Ancien mot de passe refusé ou nouveau invalide
        """
        response = await self._gateway.post(
            self._endpoints.change_password,
            json={"old_password": old_password, "new_password": new_password},
        )
        self._raise_for_status(response)

    def _apply_identity(self, response: httpx.Response) -> Identity:
        payload = self._raise_for_status(response)
        try:
            identity = Identity.from_api(payload)
        except ValueError as e:
            raise ProfileServiceError(
                response.status_code, "Respuesta inválida del servidor", payload
            ) from e
        self._session.replace_identity(identity)
        return identity

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> Any:
        try:
            payload = response.json() if response.content else None
        except ValueError:
            payload = None
        if response.status_code >= 400:
            raise ProfileServiceError(
                response.status_code, extract_error_message(payload), payload
            )
        return payload
