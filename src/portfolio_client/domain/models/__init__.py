"""Domain models package."""

from portfolio_client.domain.models.account import Account, Position, total_value
from portfolio_client.domain.models.snapshot import Snapshot

__all__ = [
    "Account",
    "Position",
    "Snapshot",
    "total_value",
]
