"""Result types produced by a sync load cycle."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional, Union

from portfolio_client.core.exceptions import AppError
from portfolio_client.domain.models import Account
from portfolio_client.domain.views.portfolio import PortfolioStats


class OutcomeSource(str, Enum):
    """Where the data in a load outcome came from."""

    AUTHENTICATION_REQUIRED = "authentication_required"
    CACHE = "cache"
    NETWORK = "network"
    EXPIRED_CACHE = "expired_cache"
    FAILURE = "failure"


@dataclass(frozen=True)
class AuthenticationRequired:
    """No usable session token; the caller must route to login."""

    source: ClassVar[OutcomeSource] = OutcomeSource.AUTHENTICATION_REQUIRED

    reason: str = "Session token missing or expired"


@dataclass(frozen=True)
class ServedFromCache:
    """Fresh local data; no network call was made."""

    source: ClassVar[OutcomeSource] = OutcomeSource.CACHE
    is_offline: ClassVar[bool] = False

    accounts: list[Account]
    total_value: Decimal
    as_of: datetime


@dataclass(frozen=True)
class ServedFromNetwork:
    """Freshly fetched data, already persisted to the local replica."""

    source: ClassVar[OutcomeSource] = OutcomeSource.NETWORK
    is_offline: ClassVar[bool] = False

    accounts: list[Account]
    total_value: Decimal
    as_of: datetime
    portfolio_stats: Optional[PortfolioStats] = None


@dataclass(frozen=True)
class ServedFromExpiredCache:
    """Old local data served because the fetch failed."""

    source: ClassVar[OutcomeSource] = OutcomeSource.EXPIRED_CACHE
    is_offline: ClassVar[bool] = True

    accounts: list[Account]
    total_value: Decimal
    as_of: Optional[datetime]
    warning: AppError = field(default_factory=lambda: AppError("Using cached data"))

    @property
    def advisory(self) -> str:
        return f"Using cached/offline data: {self.warning.message}"


@dataclass(frozen=True)
class Failure:
    """The load failed and there was nothing cached to fall back on."""

    source: ClassVar[OutcomeSource] = OutcomeSource.FAILURE

    error: AppError


LoadOutcome = Union[
    AuthenticationRequired,
    ServedFromCache,
    ServedFromNetwork,
    ServedFromExpiredCache,
    Failure,
]
