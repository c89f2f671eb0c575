"""View models for service outputs."""

from portfolio_client.domain.views.portfolio import (
    AssetClassStats,
    PerformerPosition,
    PortfolioStats,
    CacheStatus,
)
from portfolio_client.domain.views.outcomes import (
    OutcomeSource,
    AuthenticationRequired,
    ServedFromCache,
    ServedFromNetwork,
    ServedFromExpiredCache,
    Failure,
    LoadOutcome,
)

__all__ = [
    "AssetClassStats",
    "PerformerPosition",
    "PortfolioStats",
    "CacheStatus",
    "OutcomeSource",
    "AuthenticationRequired",
    "ServedFromCache",
    "ServedFromNetwork",
    "ServedFromExpiredCache",
    "Failure",
    "LoadOutcome",
]
