"""
CONDOMINIO Console - Bootstrap
Assemble les composants du cœur de session autour d'un client HTTP unique.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Sequence

import httpx

from ..access import DEFAULT_NAVIGATION, NavEntry, RouteGuard, filter_navigation
from ..gateway import ProfileService, RequestGateway
from ..logging import LogConfig, StructuredLogger, parse_log_level
from ..network import create_http_client
from ..session import (
    ICredentialStore,
    IdentityApiClient,
    SessionManager,
    create_credential_store,
)
from .config_loader import ConfigLoader
from .interfaces import ClientConfig


@dataclass
class ConsoleSession:
    """
    Composants câblés d'une instance de console.

    Une instance par processus; les tests en construisent autant que
    nécessaire, chacune isolée.
    """

    config: ClientConfig
    http_client: httpx.AsyncClient
    store: ICredentialStore
    identity_api: IdentityApiClient
    session: SessionManager
    gateway: RequestGateway
    profiles: ProfileService
    guard: RouteGuard
    navigation: List[NavEntry]

    def visible_navigation(self) -> List[NavEntry]:
        """Menu filtré pour l'identité courante (vide sans session)."""
        return filter_navigation(
            self.navigation, self.session.current_identity(), self.config.admin_role_name
        )

    async def aclose(self) -> None:
        await self.http_client.aclose()


def build_console_session(
    config: Optional[ClientConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    store: Optional[ICredentialStore] = None,
    navigation: Optional[Sequence[NavEntry]] = None,
    output_handler: Optional[Callable[[str], None]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> ConsoleSession:
    """
    Construit la console à partir de la configuration.

    Args:
        config: Configuration (défaut: ClientConfig())
        transport: Transport httpx injecté (MockTransport en tests)
        store: Stockage imposé (sinon construit depuis la config)
        navigation: Arbre de navigation (sinon config.navigation_path,
            sinon DEFAULT_NAVIGATION)
        output_handler: Sortie des logs JSON
        env: Environnement pour la clé de chiffrement (défaut: os.environ)

    Raises:
        ConfigError: navigation_path absent ou invalide
    """
    config = config or ClientConfig()
    env = os.environ if env is None else env

    if navigation is None:
        navigation = (
            ConfigLoader(env).load_navigation(Path(config.navigation_path).expanduser())
            if config.navigation_path
            else DEFAULT_NAVIGATION
        )

    log_config = LogConfig(min_level=parse_log_level(config.log_level))

    def make_logger(name: str) -> StructuredLogger:
        return StructuredLogger(name, config=log_config, output_handler=output_handler)

    timeouts = config.timeouts.to_timeout_manager()
    http_client = create_http_client(config.api_base_url, timeouts, transport=transport)

    if store is None:
        settings = config.credential_store
        key = env.get(settings.encryption_key_env) if settings.encryption_key_env else None
        store = create_credential_store(
            settings.backend,
            path=settings.path,
            fernet_key=key or None,
            logger=make_logger("credential-store"),
        )

    identity_api = IdentityApiClient(
        http_client,
        endpoints=config.endpoints,
        logger=make_logger("identity-api"),
        timeouts=timeouts,
    )
    session = SessionManager(store, identity_api, logger=make_logger("session"))
    gateway = RequestGateway(http_client, session, logger=make_logger("gateway"))

    return ConsoleSession(
        config=config,
        http_client=http_client,
        store=store,
        identity_api=identity_api,
        session=session,
        gateway=gateway,
        profiles=ProfileService(gateway, session, endpoints=config.endpoints),
        guard=RouteGuard(
            session,
            login_path=config.login_path,
            landing_path=config.landing_path,
            admin_role=config.admin_role_name,
        ),
        navigation=list(navigation),
    )
