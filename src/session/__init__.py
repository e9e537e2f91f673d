"""
LOT 4: Session

Cycle de vie de la session authentifiée du client console:
- Stockage durable du couple access/refresh (mémoire ou fichier chiffré)
- Client Identity API (login, refresh, logout, profil, inscription)
- Gestionnaire de session avec renouvellement dédupliqué
"""

from .interfaces import (
    # Enums
    SessionStatus,
    # Data classes
    Credential,
    Identity,
    AuthEndpoints,
    RefreshResult,
    StateListener,
    # Interfaces
    ICredentialStore,
    IIdentityApi,
    ISessionManager,
)
from .errors import (
    DEFAULT_ERROR_MESSAGE,
    SessionError,
    AuthenticationError,
    SessionExpiredError,
    IdentityApiError,
)
from .credential_store import (
    InMemoryCredentialStore,
    FileCredentialStore,
    CredentialStoreError,
    create_credential_store,
)
from .identity_api import (
    IdentityApiClient,
    extract_error_message,
)
from .session_manager import SessionManager

__all__ = [
    # Enums
    "SessionStatus",
    # Data classes
    "Credential",
    "Identity",
    "AuthEndpoints",
    "RefreshResult",
    "StateListener",
    # Interfaces
    "ICredentialStore",
    "IIdentityApi",
    "ISessionManager",
    # Implementations
    "InMemoryCredentialStore",
    "FileCredentialStore",
    "create_credential_store",
    "IdentityApiClient",
    "extract_error_message",
    "SessionManager",
    # Exceptions
    "DEFAULT_ERROR_MESSAGE",
    "SessionError",
    "AuthenticationError",
    "SessionExpiredError",
    "IdentityApiError",
    "CredentialStoreError",
]
