"""Domain layer - pure business models with no external dependencies."""

from portfolio_client.domain.models import (
    Account,
    Position,
    Snapshot,
    total_value,
)

__all__ = [
    "Account",
    "Position",
    "Snapshot",
    "total_value",
]
