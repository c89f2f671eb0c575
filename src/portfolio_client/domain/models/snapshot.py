"""Snapshot domain model."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Snapshot:
    """
    Point-in-time capture of one account after a successful sync.

    positions_json holds the account's positions in the remote wire format.
    Snapshots are append-only and pruned oldest-first.
    """

    account_number: str
    timestamp: datetime
    value: Decimal
    positions_json: str = "[]"
    snapshot_id: Optional[int] = None
