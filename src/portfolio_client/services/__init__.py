"""Service layer - business logic orchestration."""

from portfolio_client.services.auth_service import AuthService
from portfolio_client.services.freshness import CACHE_VALIDITY, is_fresh, should_use_cache
from portfolio_client.services.sync_orchestrator import SyncOrchestrator
from portfolio_client.services.token_guard import is_expired, token_expiry

__all__ = [
    "AuthService",
    "CACHE_VALIDITY",
    "is_fresh",
    "should_use_cache",
    "SyncOrchestrator",
    "is_expired",
    "token_expiry",
]
