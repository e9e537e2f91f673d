"""
LOT 3: Network - HTTP Client

Construction du httpx.AsyncClient unique partagé par le client Identity API
et la passerelle de requêtes.
"""

from typing import Dict, Optional

import httpx

from .interfaces import ITimeoutManager
from .timeout_manager import TimeoutManager

DEFAULT_HEADERS: Dict[str, str] = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def create_http_client(
    base_url: str,
    timeout_manager: Optional[ITimeoutManager] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    headers: Optional[Dict[str, str]] = None,
) -> httpx.AsyncClient:
    """
    Crée le client HTTP asynchrone du backend.

    Les redirections ne sont pas suivies: un 302 vers une page de login
    doit remonter tel quel et non masquer un 401.

    Args:
        base_url: URL de base de l'API (ex: http://127.0.0.1:8000/api)
        timeout_manager: Source des timeouts (défaut: TimeoutManager())
        transport: Transport injecté (httpx.MockTransport en tests)
        headers: En-têtes additionnels

    Returns:
        httpx.AsyncClient prêt à l'emploi (à fermer par l'appelant)
    """
    if not base_url or not base_url.strip():
        raise ValueError("base_url cannot be empty")

    timeouts = timeout_manager or TimeoutManager()
    merged_headers = dict(DEFAULT_HEADERS)
    if headers:
        merged_headers.update(headers)

    return httpx.AsyncClient(
        base_url=base_url.strip(),
        headers=merged_headers,
        timeout=timeouts.as_httpx_timeout(),
        transport=transport,
        follow_redirects=False,
    )
