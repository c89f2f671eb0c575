"""Local replica repository protocol."""

from datetime import datetime
from typing import Protocol, Optional

from portfolio_client.domain.models import Account, Position, Snapshot


class ReplicaRepository(Protocol):
    """Interface for the on-device mirror of accounts, positions and snapshots."""

    def load_cached_accounts(self) -> list[Account]:
        """All cached accounts ordered by account number, positions populated."""
        ...

    def get_account(self, account_number: str) -> Optional[Account]:
        """Retrieve one cached account by number."""
        ...

    def most_recent_snapshot_timestamp(self) -> Optional[datetime]:
        """Timestamp of the newest snapshot across all accounts."""
        ...

    def replace_all(self, accounts: list[Account], captured_at: datetime) -> None:
        """Atomically replace the cached accounts and record one snapshot each."""
        ...

    def list_snapshots(self, account_number: Optional[str] = None) -> list[Snapshot]:
        """Snapshots in ascending time order, optionally for one account."""
        ...

    def snapshot_positions(self, snapshot: Snapshot) -> list[Position]:
        """Decode the position set captured in a snapshot."""
        ...

    def count_accounts(self) -> int:
        ...

    def count_snapshots(self) -> int:
        ...

    def clear(self) -> None:
        """Atomically remove every account, position and snapshot."""
        ...
