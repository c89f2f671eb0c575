"""Remote portfolio service protocol and base types."""

from dataclasses import dataclass, field
from typing import Optional, Protocol

from portfolio_client.domain.models import Account
from portfolio_client.domain.views import PortfolioStats
from portfolio_client.providers.payloads import CacheInfo, CacheOperationResult


@dataclass
class AccountsFetch:
    """Accounts returned by the service, with optional portfolio statistics."""

    accounts: list[Account] = field(default_factory=list)
    portfolio_stats: Optional[PortfolioStats] = None


class RemoteAPI(Protocol):
    """
    Protocol for the remote portfolio service.

    Implementations raise NetworkError, ServerError or DecodeError on fetch
    failures and AuthenticationFailedError when the service rejects the
    credentials or token.
    """

    def login(self, user: str, password: str) -> str:
        """Exchange credentials for a session token."""
        ...

    def fetch_accounts(self, token: str) -> AccountsFetch:
        """
        Fetch all accounts with their positions.

        Accepts either a bare account list or the extended response with
        portfolio statistics.
        """
        ...

    def get_cache_info(self, token: str) -> CacheInfo:
        """Describe the server-side cache."""
        ...

    def invalidate_cache(self, token: str) -> CacheOperationResult:
        """Drop the server-side cache."""
        ...

    def refresh_cache(self, token: str) -> CacheOperationResult:
        """Force the server to rebuild its cache."""
        ...
