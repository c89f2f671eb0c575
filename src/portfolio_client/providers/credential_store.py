"""Session token storage."""

import logging
import os
from pathlib import Path
from typing import Optional, Protocol

from portfolio_client.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    """Interface for at-rest session token storage."""

    def save(self, token: str) -> None:
        """Store the token, replacing any previous one."""
        ...

    def retrieve(self) -> Optional[str]:
        """Return the stored token, or None when not logged in."""
        ...

    def delete(self) -> None:
        """Remove the stored token (no-op if none)."""
        ...


class FileCredentialStore:
    """Stores the session token in a file readable only by the current user."""

    def __init__(self, path: Path):
        self._path = Path(path)

    def save(self, token: str) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self.delete()
            fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(token)
        except OSError as e:
            raise StorageError(f"Failed to save session token: {e}") from e
        logger.info("Session token saved")

    def retrieve(self) -> Optional[str]:
        if not self._path.exists():
            return None
        try:
            token = self._path.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise StorageError(f"Failed to read session token: {e}") from e
        return token or None

    def delete(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete session token: {e}") from e
