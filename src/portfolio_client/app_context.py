"""Application context for in-process service management.

Constructs every collaborator explicitly and wires them together, so the
core services never reach for global singletons and tests can substitute
any piece.
"""

from pathlib import Path
from typing import Optional

from portfolio_client.config.settings import Settings, set_settings, get_settings
from portfolio_client.repositories.sqlalchemy.database import (
    init_db_with_path,
    reset_database,
    get_session,
)
from portfolio_client.repositories.sqlalchemy import SqlAlchemyReplicaRepository
from portfolio_client.providers import (
    CredentialStore,
    FileCredentialStore,
    HttpRemoteAPI,
    RemoteAPI,
)
from portfolio_client.services import AuthService, SyncOrchestrator


class AppContext:
    """
    Application context providing in-process access to all services.

    Services are created lazily and shared for the lifetime of the context,
    so the orchestrator's in-flight and published state is shared by every
    caller.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        remote_api: Optional[RemoteAPI] = None,
        credential_store: Optional[CredentialStore] = None,
    ):
        """
        Initialize application context.

        Args:
            data_dir: Optional data directory. If not provided, uses default.
            remote_api: Optional RemoteAPI override (defaults to HttpRemoteAPI).
            credential_store: Optional CredentialStore override.
        """
        self._data_dir = data_dir
        self._session = None
        self._initialized = False

        self._remote_api: Optional[RemoteAPI] = remote_api
        self._credential_store: Optional[CredentialStore] = credential_store
        self._auth_service: Optional[AuthService] = None
        self._orchestrator: Optional[SyncOrchestrator] = None

    def initialize(self, data_dir: Optional[Path] = None) -> None:
        """
        Initialize or reinitialize the application with a data directory.

        Args:
            data_dir: Data directory path. Uses default if not provided.
        """
        if data_dir:
            self._data_dir = data_dir

        current = get_settings()
        settings = current.model_copy(update={"data_dir": self._data_dir or current.data_dir})
        set_settings(settings)

        reset_database()
        db_path = settings.get_data_dir() / "portfolio.db"
        init_db_with_path(db_path)

        self.close()
        self._auth_service = None
        self._orchestrator = None

        self._initialized = True

    @property
    def is_initialized(self) -> bool:
        """Check if context is initialized."""
        return self._initialized

    @property
    def settings(self) -> Settings:
        return get_settings()

    def _get_session(self):
        """Get or create database session."""
        if self._session is None:
            self._session = get_session()
        return self._session

    # Collaborators

    @property
    def remote_api(self) -> RemoteAPI:
        if self._remote_api is None:
            settings = get_settings()
            self._remote_api = HttpRemoteAPI(
                base_url=settings.api_base_url,
                timeout_seconds=settings.request_timeout_seconds,
                min_payload_bytes=settings.min_payload_bytes,
            )
        return self._remote_api

    @property
    def credential_store(self) -> CredentialStore:
        if self._credential_store is None:
            self._credential_store = FileCredentialStore(get_settings().get_credential_file())
        return self._credential_store

    def _get_replica_repo(self) -> SqlAlchemyReplicaRepository:
        return SqlAlchemyReplicaRepository(
            self._get_session(),
            snapshot_retention=get_settings().snapshot_retention,
        )

    # Service accessors

    @property
    def auth(self) -> AuthService:
        """Get the AuthService instance."""
        if self._auth_service is None:
            self._auth_service = AuthService(
                remote_api=self.remote_api,
                credential_store=self.credential_store,
            )
        return self._auth_service

    @property
    def sync(self) -> SyncOrchestrator:
        """Get the SyncOrchestrator instance."""
        if self._orchestrator is None:
            self._orchestrator = SyncOrchestrator(
                remote_api=self.remote_api,
                credential_store=self.credential_store,
                replica_repo=self._get_replica_repo(),
                cache_validity=get_settings().get_cache_validity(),
            )
        return self._orchestrator

    def close(self) -> None:
        """Clean up resources."""
        if self._session:
            self._session.close()
            self._session = None


# Global application context (one per process)
_app_context: Optional[AppContext] = None


def get_app_context() -> AppContext:
    """Get or create the global application context."""
    global _app_context
    if _app_context is None:
        _app_context = AppContext()
    return _app_context


def set_app_context(context: Optional[AppContext]) -> None:
    """Set the global application context."""
    global _app_context
    _app_context = context
