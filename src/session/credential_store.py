"""
LOT 4: Session - Credential Store

Persistance du couple access/refresh entre deux lancements.

Les deux jetons sont toujours écrits et effacés ensemble (un seul document),
jamais indépendamment: un couple dépareillé n'est pas représentable.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Union

from cryptography.fernet import Fernet, InvalidToken

from ..logging import StructuredLogger
from .interfaces import Credential, ICredentialStore


class CredentialStoreError(Exception):
    """Configuration du stockage invalide."""

    pass


class InMemoryCredentialStore(ICredentialStore):
    """
    Stockage en mémoire (tests, shells éphémères).

    Example:
        store = InMemoryCredentialStore()
        store.save(Credential("a", "r"))
        assert store.load() == Credential("a", "r")
    """

    def __init__(self, initial: Optional[Credential] = None) -> None:
        self._values: Dict[str, str] = {}
        if initial is not None:
            self.save(initial)

    def save(self, credential: Credential) -> None:
        self._values = {
            self.ACCESS_KEY: credential.access_token,
            self.REFRESH_KEY: credential.refresh_token,
        }

    def load(self) -> Optional[Credential]:
        access = self._values.get(self.ACCESS_KEY)
        refresh = self._values.get(self.REFRESH_KEY)
        if not access or not refresh:
            return None
        return Credential(access_token=access, refresh_token=refresh)

    def clear(self) -> None:
        self._values = {}


class FileCredentialStore(ICredentialStore):
    """
    Stockage fichier JSON, optionnellement chiffré Fernet.

    Comportement:
        - Écriture atomique (fichier temporaire + os.replace)
        - Fichier absent, corrompu, indéchiffrable ou incomplet → None
        - Stockage indisponible (OSError) → loggé, traité comme absent

    Example:
        store = FileCredentialStore("~/.condominio/session.json", fernet_key=key)
        store.save(credential)
    """

    def __init__(
        self,
        path: Union[str, Path],
        fernet_key: Optional[Union[str, bytes]] = None,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        """
        Args:
            path: Fichier de session
            fernet_key: Clé Fernet urlsafe base64 (chiffrement au repos)
            logger: Logger structuré

        Raises:
            CredentialStoreError: Clé Fernet invalide
        """
        self._path = Path(path).expanduser()
        self._logger = logger or StructuredLogger("credential-store")
        self._fernet: Optional[Fernet] = None
        if fernet_key:
            try:
                self._fernet = Fernet(fernet_key)
            except (ValueError, TypeError) as e:
                raise CredentialStoreError(f"Invalid Fernet key: {e}") from e

    @property
    def path(self) -> Path:
        return self._path

    @property
    def encrypted(self) -> bool:
        return self._fernet is not None

    def save(self, credential: Credential) -> None:
        document = json.dumps(
            {
                self.ACCESS_KEY: credential.access_token,
                self.REFRESH_KEY: credential.refresh_token,
            }
        ).encode("utf-8")
        if self._fernet is not None:
            document = self._fernet.encrypt(document)

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".session-")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(document)
                os.chmod(tmp_name, 0o600)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            self._logger.error(
                "Credential store unavailable on save", path=str(self._path), error=str(e)
            )

    def load(self) -> Optional[Credential]:
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            self._logger.warn(
                "Credential store unavailable on load", path=str(self._path), error=str(e)
            )
            return None

        if self._fernet is not None:
            try:
                raw = self._fernet.decrypt(raw)
            except InvalidToken:
                self._logger.warn("Credential store not decryptable", path=str(self._path))
                return None

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            self._logger.warn("Credential store corrupted", path=str(self._path))
            return None

        if not isinstance(data, dict):
            return None

        access = data.get(self.ACCESS_KEY)
        refresh = data.get(self.REFRESH_KEY)
        if not isinstance(access, str) or not isinstance(refresh, str) or not access or not refresh:
            return None
        return Credential(access_token=access, refresh_token=refresh)

    def clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            self._logger.error(
                "Credential store unavailable on clear", path=str(self._path), error=str(e)
            )


def create_credential_store(
    backend: str = "memory",
    path: Optional[Union[str, Path]] = None,
    fernet_key: Optional[Union[str, bytes]] = None,
    logger: Optional[StructuredLogger] = None,
) -> ICredentialStore:
    """
    Fabrique le stockage configuré.

    Args:
        backend: "memory" ou "file"
        path: Fichier (obligatoire pour "file")
        fernet_key: Clé de chiffrement optionnelle ("file" uniquement)

    Raises:
        CredentialStoreError: Backend inconnu ou chemin manquant
    """
    if backend == "memory":
        return InMemoryCredentialStore()
    if backend == "file":
        if not path:
            raise CredentialStoreError("File credential store requires a path")
        return FileCredentialStore(path, fernet_key=fernet_key, logger=logger)
    raise CredentialStoreError(f"Unknown credential store backend: {backend}")
