"""
CONDOMINIO Console - Pytest Configuration
Fixtures partagées: backend simulé (httpx.MockTransport), client HTTP, stockage.
"""

from pathlib import Path

import httpx
import pytest

from src.session import InMemoryCredentialStore
from tests.fake_backend import API_URL, FakeIdentityBackend


@pytest.fixture
def backend() -> FakeIdentityBackend:
    """Backend simulé neuf pour chaque test."""
    return FakeIdentityBackend()


@pytest.fixture
def transport(backend: FakeIdentityBackend) -> httpx.MockTransport:
    return httpx.MockTransport(backend.handler)


@pytest.fixture
def http_client(transport: httpx.MockTransport) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=API_URL, transport=transport)


@pytest.fixture
def memory_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def config_dir() -> Path:
    """Dossier config/ livré avec le projet."""
    return Path(__file__).parent.parent / "config"
