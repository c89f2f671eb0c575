"""Dependency injection for FastAPI."""

from fastapi import Depends

from portfolio_client.app_context import AppContext, get_app_context
from portfolio_client.services import AuthService, SyncOrchestrator


def get_context() -> AppContext:
    """Provide the process-wide AppContext, initializing it on first use."""
    context = get_app_context()
    if not context.is_initialized:
        context.initialize()
    return context


def get_sync_orchestrator(context: AppContext = Depends(get_context)) -> SyncOrchestrator:
    """Provide the shared SyncOrchestrator instance."""
    return context.sync


def get_auth_service(context: AppContext = Depends(get_context)) -> AuthService:
    """Provide the AuthService instance."""
    return context.auth
