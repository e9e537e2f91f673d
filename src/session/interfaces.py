"""
LOT 4: Session - Interfaces

Contrats du cycle de vie de la session authentifiée:
stockage du couple de jetons, Identity API et gestionnaire de session.

Règles:
    - Un Credential existe si et seulement si la session est AUTHENTICATED ou RENEWING
    - Au plus un renouvellement en vol, quel que soit le nombre de demandeurs
    - Tout demandeur attaché à un renouvellement est résolu avant la sortie de RENEWING
    - DEAD est terminal: stockage vidé, identité oubliée, aucun rejeu
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict


class SessionStatus(Enum):
    """États de la session."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"  # Restauration depuis le stockage
    AUTHENTICATED = "authenticated"
    RENEWING = "renewing"
    DEAD = "dead"


@dataclass(frozen=True)
class Credential:
    """
    Couple de jetons opaques access/refresh.

    Jamais décodé côté client: stocké, attaché, remplacé en bloc.
    Les jetons sont exclus du repr pour ne pas fuiter dans les traces.
    """

    access_token: str = field(repr=False)
    refresh_token: str = field(repr=False)

    def __post_init__(self):
        if not self.access_token or not self.refresh_token:
            raise ValueError("access_token and refresh_token are required")

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.access_token}"


class Identity(BaseModel):
    """Profil de l'utilisateur authentifié, en lecture seule hors SessionManager."""

    model_config = ConfigDict(frozen=True)

    id: Union[int, str]
    username: str
    display_name: str = ""
    role_name: Optional[str] = None
    is_privileged: bool = False
    condominium_id: Optional[Union[int, str]] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Identity":
        """
        Construit l'identité depuis le JSON utilisateur du backend.

        Mapping:
            full_name (ou first_name + last_name, ou username) → display_name
            role_name (ou role.nombre)                         → role_name
            is_staff                                           → is_privileged
            condominio (objet ou id)                           → condominium_id

        Raises:
            ValueError: Payload sans id ni username
        """
        if not isinstance(payload, dict) or payload.get("id") is None:
            raise ValueError("User payload must contain an id")

        username = payload.get("username") or payload.get("email") or ""
        if not username:
            raise ValueError("User payload must contain a username")

        display_name = payload.get("full_name") or " ".join(
            part for part in (payload.get("first_name"), payload.get("last_name")) if part
        )

        role_name = payload.get("role_name")
        role = payload.get("role")
        if not role_name and isinstance(role, dict):
            role_name = role.get("nombre") or role.get("name")

        condominium = payload.get("condominio")
        if isinstance(condominium, dict):
            condominium = condominium.get("id")

        return cls(
            id=payload["id"],
            username=username,
            display_name=display_name or username,
            role_name=role_name or None,
            is_privileged=bool(payload.get("is_staff", False)),
            condominium_id=condominium,
        )


@dataclass(frozen=True)
class AuthEndpoints:
    """Chemins de l'Identity API, relatifs à l'URL de base."""

    login: str = "/auth/login/"
    refresh: str = "/auth/token/refresh/"
    logout: str = "/auth/logout/"
    profile: str = "/auth/profile/"
    register: str = "/auth/register/"
    profile_update: str = "/auth/profile/update/"
    change_password: str = "/auth/change-password/"


@dataclass(frozen=True)
class RefreshResult:
    """Réponse du endpoint de renouvellement."""

    access_token: str = field(repr=False)
    refresh_token: Optional[str] = field(default=None, repr=False)  # Rotation serveur


StateListener = Callable[[SessionStatus, Optional[Identity]], None]


class ICredentialStore(ABC):
    """
    Persistance durable du couple de jetons.

    Synchrone, sans réseau. Stockage indisponible = absent.
    """

    ACCESS_KEY: str = "access_token"
    REFRESH_KEY: str = "refresh_token"

    @abstractmethod
    def save(self, credential: Credential) -> None:
        """Enregistre le couple (les deux clés ensemble)."""
        pass

    @abstractmethod
    def load(self) -> Optional[Credential]:
        """Retourne le couple enregistré, None si absent ou illisible."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Efface le couple (les deux clés ensemble)."""
        pass


class IIdentityApi(ABC):
    """Collaborateur externe: endpoints d'authentification du backend."""

    @abstractmethod
    async def login(self, username: str, password: str) -> Tuple[Credential, Identity]:
        """
        POST login.

        Raises:
            IdentityApiError: 400/401 identifiants invalides, ou transport
        """
        pass

    @abstractmethod
    async def refresh(self, refresh_token: str) -> RefreshResult:
        """
        POST token/refresh.

        Raises:
            IdentityApiError: 401 refresh expiré/invalide, ou transport/timeout
        """
        pass

    @abstractmethod
    async def logout(self, refresh_token: str) -> None:
        """POST logout (best-effort côté appelant)."""
        pass

    @abstractmethod
    async def fetch_profile(self, access_token: str) -> Identity:
        """
        GET profile avec Bearer.

        Raises:
            IdentityApiError: 401 si jeton invalide
        """
        pass

    @abstractmethod
    async def register(self, payload: Dict[str, Any]) -> Tuple[Credential, Identity]:
        """POST register, réponse {user, tokens: {access, refresh}}."""
        pass


class ISessionManager(ABC):
    """
    Interface du gestionnaire de session.

    Seul écrivain de l'état de session et du CredentialStore.
    """

    @abstractmethod
    async def login(self, username: str, password: str) -> Identity:
        """
        Authentifie et établit la session.

        Raises:
            AuthenticationError: Message lisible, aucun état partiel conservé
        """
        pass

    @abstractmethod
    async def logout(self) -> None:
        """Efface la session puis notifie le serveur (best-effort)."""
        pass

    @abstractmethod
    async def restore_from_storage(self) -> Optional[Identity]:
        """Restaure la session au démarrage depuis le CredentialStore."""
        pass

    @abstractmethod
    async def renew(self) -> Credential:
        """
        Renouvelle l'access token, un seul appel réseau par vague de demandeurs.

        Raises:
            SessionExpiredError: Renouvellement échoué ou session fermée
        """
        pass

    @abstractmethod
    def expire(self, reason: str, credential: Optional[Credential] = None) -> None:
        """Chemin terminal: session morte, stockage vidé (idempotent)."""
        pass

    @abstractmethod
    def current_state(self) -> SessionStatus:
        pass

    @abstractmethod
    def current_identity(self) -> Optional[Identity]:
        pass

    @abstractmethod
    def current_credential(self) -> Optional[Credential]:
        pass

    @abstractmethod
    def session_generation(self) -> int:
        """Identifiant de l'instance de session courante (inchangé par un renouvellement)."""
        pass
