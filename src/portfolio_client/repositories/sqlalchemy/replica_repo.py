"""SQLAlchemy implementation of ReplicaRepository."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from portfolio_client.core.exceptions import StorageError
from portfolio_client.core.timezone import UTC, to_naive_utc
from portfolio_client.domain.models import Account, Position, Snapshot
from portfolio_client.providers.payloads import dump_positions, load_positions
from portfolio_client.repositories.sqlalchemy.orm_models import (
    AccountORM,
    PositionORM,
    SnapshotORM,
)

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOT_RETENTION = 20


class SqlAlchemyReplicaRepository:
    """
    SQLAlchemy-backed local replica.

    The replica mirrors the last successful remote fetch. Writes happen only
    through replace_all and clear, each inside a single transaction: either
    everything commits or the session is rolled back and StorageError raised.
    """

    def __init__(self, db: Session, snapshot_retention: int = DEFAULT_SNAPSHOT_RETENTION):
        self._db = db
        self._retention = snapshot_retention

    # Reads

    def load_cached_accounts(self) -> list[Account]:
        """All cached accounts ordered by account number."""
        try:
            orm_accounts = (
                self._db.query(AccountORM)
                .options(selectinload(AccountORM.positions))
                .order_by(AccountORM.account_number)
                .all()
            )
            return [self._account_to_domain(a) for a in orm_accounts]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load cached accounts: {e}") from e

    def get_account(self, account_number: str) -> Optional[Account]:
        """Retrieve one cached account by number."""
        try:
            orm_account = (
                self._db.query(AccountORM)
                .options(selectinload(AccountORM.positions))
                .filter(AccountORM.account_number == account_number)
                .first()
            )
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load account {account_number}: {e}") from e
        return self._account_to_domain(orm_account) if orm_account else None

    def most_recent_snapshot_timestamp(self) -> Optional[datetime]:
        """Newest snapshot timestamp across all accounts (aware UTC)."""
        try:
            latest = self._db.query(func.max(SnapshotORM.timestamp)).scalar()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read snapshot timestamps: {e}") from e
        return UTC.localize(latest) if latest else None

    def list_snapshots(self, account_number: Optional[str] = None) -> list[Snapshot]:
        """Snapshots in ascending time order, optionally for one account."""
        try:
            query = self._db.query(SnapshotORM)
            if account_number is not None:
                query = query.filter(SnapshotORM.account_number == account_number)
            query = query.order_by(SnapshotORM.timestamp, SnapshotORM.id)
            return [self._snapshot_to_domain(s) for s in query.all()]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list snapshots: {e}") from e

    def snapshot_positions(self, snapshot: Snapshot) -> list[Position]:
        """Decode the position set captured in a snapshot."""
        return load_positions(snapshot.positions_json, snapshot.account_number)

    def count_accounts(self) -> int:
        try:
            return self._db.query(func.count(AccountORM.account_number)).scalar() or 0
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to count accounts: {e}") from e

    def count_snapshots(self) -> int:
        try:
            return self._db.query(func.count(SnapshotORM.id)).scalar() or 0
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to count snapshots: {e}") from e

    # Writes

    def replace_all(self, accounts: list[Account], captured_at: datetime) -> None:
        """
        Replace the cached accounts wholesale.

        Deletes every position and account, inserts the new set, records one
        snapshot per account stamped captured_at, then prunes snapshots to the
        most recent `snapshot_retention`.
        """
        stamp = to_naive_utc(captured_at)
        try:
            # Old rows are deleted with bulk statements; drop stale identities first.
            self._db.expunge_all()
            self._db.query(PositionORM).delete(synchronize_session=False)
            self._db.query(AccountORM).delete(synchronize_session=False)

            for account in accounts:
                self._db.add(self._account_to_orm(account))
                self._db.add(
                    SnapshotORM(
                        timestamp=stamp,
                        account_number=account.account_number,
                        value=account.value,
                        positions_json=dump_positions(account.positions),
                    )
                )
            self._db.flush()

            self._prune_snapshots()
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.error(f"Replica replace failed, rolled back: {e}")
            raise StorageError(f"Failed to replace cached accounts: {e}") from e

        logger.info(f"Replica replaced with {len(accounts)} accounts")

    def clear(self) -> None:
        """Remove every account, position and snapshot."""
        try:
            self._db.expunge_all()
            self._db.query(PositionORM).delete(synchronize_session=False)
            self._db.query(AccountORM).delete(synchronize_session=False)
            self._db.query(SnapshotORM).delete(synchronize_session=False)
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            raise StorageError(f"Failed to clear local replica: {e}") from e
        logger.info("Local replica cleared")

    def _prune_snapshots(self) -> None:
        """Keep only the most recent snapshots (oldest dropped first)."""
        keep_ids = [
            row.id
            for row in self._db.query(SnapshotORM.id)
            .order_by(SnapshotORM.timestamp.desc(), SnapshotORM.id.desc())
            .limit(self._retention)
        ]
        pruned = (
            self._db.query(SnapshotORM)
            .filter(SnapshotORM.id.not_in(keep_ids))
            .delete(synchronize_session=False)
        )
        if pruned:
            logger.debug(f"Pruned {pruned} old snapshots")

    # Mapping

    @staticmethod
    def _account_to_orm(account: Account) -> AccountORM:
        return AccountORM(
            account_number=account.account_number,
            label=account.label,
            value=account.value,
            positions=[
                PositionORM(
                    isin_code=p.isin_code,
                    instrument_name=p.instrument_name,
                    market_value=p.market_value,
                    purchase_cost=p.purchase_cost,
                    unrealized_pnl=p.unrealized_pnl,
                    realized_pnl=p.realized_pnl,
                    performance=p.performance,
                    weight=p.weight,
                    quantity=p.quantity,
                    asset_class=p.asset_class,
                    reporting_asset_class_code=p.reporting_asset_class_code,
                    closing_price=p.closing_price,
                    snapshot_date=to_naive_utc(p.snapshot_date) if p.snapshot_date else None,
                )
                for p in account.positions
            ],
        )

    @staticmethod
    def _account_to_domain(orm: AccountORM) -> Account:
        return Account(
            account_number=orm.account_number,
            label=orm.label or "",
            value=_decimal(orm.value),
            positions=[
                Position(
                    isin_code=p.isin_code,
                    instrument_name=p.instrument_name,
                    market_value=_decimal(p.market_value),
                    purchase_cost=_decimal(p.purchase_cost),
                    unrealized_pnl=_decimal(p.unrealized_pnl),
                    realized_pnl=_decimal(p.realized_pnl),
                    performance=_decimal(p.performance),
                    weight=_decimal(p.weight),
                    quantity=_decimal(p.quantity),
                    asset_class=p.asset_class or "",
                    reporting_asset_class_code=p.reporting_asset_class_code or "",
                    closing_price=_decimal(p.closing_price),
                    snapshot_date=UTC.localize(p.snapshot_date) if p.snapshot_date else None,
                )
                for p in orm.positions
            ],
        )

    @staticmethod
    def _snapshot_to_domain(orm: SnapshotORM) -> Snapshot:
        return Snapshot(
            account_number=orm.account_number,
            timestamp=UTC.localize(orm.timestamp),
            value=_decimal(orm.value),
            positions_json=orm.positions_json or "[]",
            snapshot_id=orm.id,
        )


def _decimal(value) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")
