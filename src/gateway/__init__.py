"""
LOT 5: Gateway

Passerelle de requêtes authentifiées:
- Attache le Bearer courant à chaque requête
- Renouvellement partagé et rejeu unique sur 401
- Éviction de toutes les requêtes en attente quand la session meurt
"""

from .request_gateway import (
    RequestGateway,
    GatewayTransportError,
)
from .profile_service import (
    ProfileService,
    ProfileServiceError,
)

__all__ = [
    # Implementations
    "RequestGateway",
    "ProfileService",
    # Exceptions
    "GatewayTransportError",
    "ProfileServiceError",
]
