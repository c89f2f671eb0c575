"""API routers package."""

from portfolio_client.api.routers.portfolio import router as portfolio_router
from portfolio_client.api.routers.accounts import router as accounts_router
from portfolio_client.api.routers.auth import router as auth_router
from portfolio_client.api.routers.cache import router as cache_router

__all__ = [
    "portfolio_router",
    "accounts_router",
    "auth_router",
    "cache_router",
]
