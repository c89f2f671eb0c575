"""View models for portfolio statistics and cache status."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from portfolio_client.providers.payloads import CacheInfo


@dataclass
class AssetClassStats:
    """Aggregates for one asset class."""

    total_value: Decimal
    total_weight: Decimal
    weighted_performance: Decimal
    positions_count: int
    average_performance: Decimal
    formatted: dict[str, str] = field(default_factory=dict)


@dataclass
class PerformerPosition:
    """A position listed among the best or worst performers."""

    isin_code: str
    instrument_name: str
    performance: Decimal
    market_value: Decimal
    weight: Decimal
    account_number: str
    asset_class: str
    formatted: dict[str, str] = field(default_factory=dict)


@dataclass
class PortfolioStats:
    """
    Portfolio-wide performance statistics computed by the remote service.

    Only present when the service returns the extended accounts response.
    The formatted dicts carry server-rendered strings and are passed
    through untouched.
    """

    total_value: Decimal
    total_unrealized_pnl: Decimal
    total_realized_pnl: Decimal
    weighted_performance: Decimal
    total_weight: Decimal
    positions_count: int
    accounts_count: int
    performance_by_asset_class: dict[str, AssetClassStats] = field(default_factory=dict)
    top_performers: list[PerformerPosition] = field(default_factory=list)
    worst_performers: list[PerformerPosition] = field(default_factory=list)
    last_update: Optional[str] = None
    formatted: dict[str, str] = field(default_factory=dict)


@dataclass
class CacheStatus:
    """Combined view of the local replica and the server-side cache."""

    last_sync: Optional[datetime]
    age: Optional[timedelta]
    age_human: str
    is_fresh: bool
    accounts_count: Optional[int]  # None when the local replica could not be read
    snapshots_count: Optional[int]
    token_expires_at: Optional[datetime] = None
    server_cache: Optional["CacheInfo"] = None

    @property
    def summary(self) -> str:
        """One-line status combining local and server cache state."""
        if self.accounts_count is None:
            local = "Unavailable"
        elif self.is_fresh:
            local = "Fresh"
        else:
            local = "Stale" if self.last_sync else "Empty"
        if self.server_cache is None:
            return f"Local: {local} | Server: unavailable"
        return f"Local: {local} | Server: {self.server_cache.status_description}"
