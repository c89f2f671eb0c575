"""Login and session token management."""

import logging
from datetime import datetime
from typing import Optional

from portfolio_client.core.exceptions import ValidationError
from portfolio_client.providers.credential_store import CredentialStore
from portfolio_client.providers.remote_api import RemoteAPI
from portfolio_client.services.token_guard import is_expired, token_expiry

logger = logging.getLogger(__name__)


class AuthService:
    """Obtains session tokens from the remote service and keeps them in the credential store."""

    def __init__(self, remote_api: RemoteAPI, credential_store: CredentialStore):
        self._remote = remote_api
        self._credentials = credential_store

    def login(self, user: str, password: str) -> str:
        """
        Authenticate and store the issued token.

        Raises ValidationError for blank credentials (no network call) and
        AuthenticationFailedError when the service rejects them.
        """
        user = (user or "").strip()
        if not user or not password:
            raise ValidationError("Username and password are required")

        token = self._remote.login(user, password)
        self._credentials.save(token)
        logger.info(f"Logged in as {user}")
        return token

    def logout(self) -> None:
        self._credentials.delete()
        logger.info("Logged out")

    def current_token(self) -> Optional[str]:
        """The stored token if it has not expired."""
        token = self._credentials.retrieve()
        if token is None or is_expired(token):
            return None
        return token

    def is_logged_in(self) -> bool:
        return self.current_token() is not None

    def token_expires_at(self) -> Optional[datetime]:
        return token_expiry(self._credentials.retrieve())
