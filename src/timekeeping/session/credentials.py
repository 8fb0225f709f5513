from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Protocol

log = logging.getLogger(__name__)


class CredentialStore(Protocol):
    def has_credential(self) -> bool:
        raise NotImplementedError

    def clear_credential(self) -> None:
        """Remove the credential; a no-op when none is held."""

        raise NotImplementedError


class InMemoryCredentialStore(CredentialStore):
    def __init__(self, token: Optional[str] = None):
        self._token = token

    def save(self, token: str) -> None:
        self._token = token

    def has_credential(self) -> bool:
        return bool(self._token)

    def clear_credential(self) -> None:
        self._token = None


class FileCredentialStore(CredentialStore):
    """Access token kept in a single local file, readable by the owner only."""

    def __init__(self, path: str | Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[str]:
        try:
            token = self._path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        return token or None

    def save(self, token: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(token.strip(), encoding="utf-8")
        os.chmod(self._path, 0o600)
        log.info("Credential saved to %s", self._path)

    def has_credential(self) -> bool:
        return self.load() is not None

    def clear_credential(self) -> None:
        if self._path.exists():
            log.info("Clearing credential %s", self._path)
        self._path.unlink(missing_ok=True)
