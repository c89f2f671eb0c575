"""Account and Position domain models."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class Position:
    """
    A single holding inside an account, as reported by the last sync.

    Positions are never edited in place; they are replaced wholesale
    together with the account that owns them.
    """

    isin_code: str
    instrument_name: str
    market_value: Decimal = field(default_factory=lambda: Decimal("0"))
    purchase_cost: Decimal = field(default_factory=lambda: Decimal("0"))
    unrealized_pnl: Decimal = field(default_factory=lambda: Decimal("0"))
    realized_pnl: Decimal = field(default_factory=lambda: Decimal("0"))
    performance: Decimal = field(default_factory=lambda: Decimal("0"))  # percent
    weight: Decimal = field(default_factory=lambda: Decimal("0"))  # percent of portfolio
    quantity: Decimal = field(default_factory=lambda: Decimal("0"))
    asset_class: str = ""
    reporting_asset_class_code: str = ""
    closing_price: Decimal = field(default_factory=lambda: Decimal("0"))
    snapshot_date: Optional[datetime] = None
    account_number: Optional[str] = None

    @property
    def is_performance_positive(self) -> bool:
        return self.performance >= 0


@dataclass
class Account:
    """
    Investment account mirrored from the remote service.

    Owns its positions exclusively; deleting the account deletes them.
    """

    account_number: str
    label: str
    value: Decimal = field(default_factory=lambda: Decimal("0"))
    positions: list[Position] = field(default_factory=list)

    def __post_init__(self) -> None:
        for position in self.positions:
            position.account_number = self.account_number

    @property
    def display_label(self) -> str:
        """Label shown to the user; falls back to the account number."""
        return self.label or self.account_number


def total_value(accounts: list[Account]) -> Decimal:
    """Sum of account values."""
    return sum((a.value for a in accounts), Decimal("0"))
