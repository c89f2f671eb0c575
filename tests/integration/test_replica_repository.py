"""
Integration tests for the SQLAlchemy replica repository with SQLite.

Tests cover:
- Round-tripping accounts and positions
- Wholesale replacement and its atomicity
- Snapshot creation, ordering and pruning
- Position cascade on account deletion
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from portfolio_client.core.exceptions import StorageError
from portfolio_client.repositories.sqlalchemy import SqlAlchemyReplicaRepository
from portfolio_client.repositories.sqlalchemy.orm_models import AccountORM, PositionORM

from tests.conftest import make_account, make_position, utc_datetime


# =============================================================================
# READS AND REPLACEMENT
# =============================================================================


class TestReplaceAll:
    """Tests for replace_all and the cached reads."""

    def test_empty_replica(self, replica_repo: SqlAlchemyReplicaRepository):
        """
        GIVEN a fresh database
        WHEN I read the replica
        THEN it has no accounts and no sync timestamp
        """
        assert replica_repo.load_cached_accounts() == []
        assert replica_repo.most_recent_snapshot_timestamp() is None
        assert replica_repo.count_accounts() == 0

    def test_round_trip_preserves_fields(self, replica_repo, fixed_now):
        """
        GIVEN an account with a fully populated position
        WHEN I replace the replica and read it back
        THEN every field survives
        """
        position = make_position(
            market_value="1500.25",
            performance="-3.5",
            purchase_cost=Decimal("1550"),
            unrealized_pnl=Decimal("-49.75"),
            weight=Decimal("37.5"),
            quantity=Decimal("25"),
            asset_class="Actions",
            reporting_asset_class_code="EQ",
            closing_price=Decimal("60.01"),
            snapshot_date=utc_datetime(2024, 6, 14, 0, 0),
        )
        replica_repo.replace_all([make_account(positions=[position], value="1500.25")], fixed_now)

        account = replica_repo.get_account("ACC-001")

        assert account.label == "PEA"
        assert account.value == Decimal("1500.25")
        restored = account.positions[0]
        assert restored.market_value == Decimal("1500.25")
        assert restored.performance == Decimal("-3.5")
        assert restored.purchase_cost == Decimal("1550")
        assert restored.unrealized_pnl == Decimal("-49.75")
        assert restored.closing_price == Decimal("60.01")
        assert restored.asset_class == "Actions"
        assert restored.snapshot_date == utc_datetime(2024, 6, 14, 0, 0)
        assert restored.account_number == "ACC-001"
        assert restored.is_performance_positive is False

    def test_accounts_ordered_by_number(self, replica_repo, fixed_now):
        replica_repo.replace_all(
            [make_account("B-2"), make_account("A-1"), make_account("C-3")], fixed_now
        )

        numbers = [a.account_number for a in replica_repo.load_cached_accounts()]

        assert numbers == ["A-1", "B-2", "C-3"]

    def test_replace_drops_accounts_missing_from_new_set(
        self, replica_repo, test_session, sample_accounts, fixed_now
    ):
        """
        GIVEN two cached accounts with three positions
        WHEN I replace with a single account
        THEN only that account and its position remain
        """
        replica_repo.replace_all(sample_accounts, fixed_now - timedelta(hours=1))

        replica_repo.replace_all([make_account("ACC-009", "New", "10")], fixed_now)

        assert [a.account_number for a in replica_repo.load_cached_accounts()] == ["ACC-009"]
        assert test_session.query(PositionORM).count() == 1

    def test_most_recent_snapshot_timestamp_is_aware(self, replica_repo, sample_accounts, fixed_now):
        replica_repo.replace_all(sample_accounts, fixed_now - timedelta(hours=3))
        replica_repo.replace_all(sample_accounts, fixed_now)

        latest = replica_repo.most_recent_snapshot_timestamp()

        assert latest == fixed_now
        assert latest.tzinfo is not None

    def test_get_unknown_account(self, replica_repo):
        assert replica_repo.get_account("NOPE") is None


# =============================================================================
# ATOMICITY
# =============================================================================


class TestAtomicity:
    """A failed replace leaves the previous replica intact."""

    def test_constraint_failure_rolls_back(self, replica_repo, sample_accounts, fixed_now):
        """
        GIVEN two cached accounts
        WHEN a replacement violates the account key mid-insert
        THEN StorageError is raised
        AND the two original accounts and snapshots are still present
        """
        replica_repo.replace_all(sample_accounts, fixed_now - timedelta(hours=8))

        duplicate = [make_account("ACC-777"), make_account("ACC-777")]
        with pytest.raises(StorageError):
            replica_repo.replace_all(duplicate, fixed_now)

        cached = replica_repo.load_cached_accounts()
        assert [a.account_number for a in cached] == ["ACC-001", "ACC-002"]
        assert sum(len(a.positions) for a in cached) == 3
        assert replica_repo.count_snapshots() == 2
        assert replica_repo.most_recent_snapshot_timestamp() == fixed_now - timedelta(hours=8)

    def test_failure_after_inserts_rolls_back(
        self, replica_repo, sample_accounts, fixed_now, monkeypatch
    ):
        """
        GIVEN two cached accounts
        WHEN the database fails after the new rows are flushed
        THEN nothing of the new set is visible
        """
        replica_repo.replace_all(sample_accounts, fixed_now - timedelta(hours=8))

        def failing_prune():
            raise OperationalError("DELETE FROM snapshots", {}, Exception("database is locked"))

        monkeypatch.setattr(replica_repo, "_prune_snapshots", failing_prune)

        with pytest.raises(StorageError):
            replica_repo.replace_all([make_account("ACC-100")], fixed_now)

        assert replica_repo.count_accounts() == 2
        assert replica_repo.get_account("ACC-100") is None


# =============================================================================
# SNAPSHOTS
# =============================================================================


class TestSnapshots:
    """Tests for snapshot history and pruning."""

    def test_one_snapshot_per_account_per_sync(self, replica_repo, sample_accounts, fixed_now):
        replica_repo.replace_all(sample_accounts, fixed_now)

        snapshots = replica_repo.list_snapshots()

        assert sorted(s.account_number for s in snapshots) == ["ACC-001", "ACC-002"]
        assert all(s.timestamp == fixed_now for s in snapshots)

    def test_snapshot_captures_positions(self, replica_repo, sample_accounts, fixed_now):
        replica_repo.replace_all(sample_accounts, fixed_now)

        snapshot = replica_repo.list_snapshots("ACC-002")[0]
        positions = replica_repo.snapshot_positions(snapshot)

        assert snapshot.value == Decimal("2500")
        assert [p.isin_code for p in positions] == ["US0378331005", "FR0000131104"]
        assert all(p.account_number == "ACC-002" for p in positions)

    def test_pruning_keeps_twenty_most_recent(self, replica_repo, fixed_now):
        """
        GIVEN 25 successful syncs of one account an hour apart
        WHEN I list the snapshots
        THEN exactly the 20 most recent remain, oldest first
        """
        stamps = [fixed_now + timedelta(hours=i) for i in range(25)]
        for i, stamp in enumerate(stamps):
            replica_repo.replace_all([make_account(value=str(1000 + i))], stamp)

        snapshots = replica_repo.list_snapshots()

        assert len(snapshots) == 20
        assert [s.timestamp for s in snapshots] == stamps[5:]
        assert snapshots[-1].value == Decimal("1024")

    def test_custom_retention(self, test_session, fixed_now):
        repo = SqlAlchemyReplicaRepository(test_session, snapshot_retention=3)

        for i in range(5):
            repo.replace_all([make_account()], fixed_now + timedelta(minutes=i))

        assert repo.count_snapshots() == 3

    def test_snapshots_survive_account_removal(self, replica_repo, sample_accounts, fixed_now):
        """
        GIVEN history for an account
        WHEN the account disappears from a later sync
        THEN its earlier snapshots remain
        """
        replica_repo.replace_all(sample_accounts, fixed_now)
        replica_repo.replace_all(sample_accounts[:1], fixed_now + timedelta(hours=7))

        assert len(replica_repo.list_snapshots("ACC-002")) == 1

    def test_clear_removes_everything(self, replica_repo, sample_accounts, fixed_now):
        replica_repo.replace_all(sample_accounts, fixed_now)

        replica_repo.clear()

        assert replica_repo.count_accounts() == 0
        assert replica_repo.count_snapshots() == 0
        assert replica_repo.most_recent_snapshot_timestamp() is None


# =============================================================================
# CASCADE
# =============================================================================


class TestCascade:
    """Positions are owned by their account."""

    def test_foreign_keys_enabled(self, test_session):
        assert test_session.execute(text("PRAGMA foreign_keys")).scalar() == 1

    def test_deleting_account_deletes_positions(
        self, replica_repo, test_session, sample_accounts, fixed_now
    ):
        """
        GIVEN a cached account with two positions
        WHEN the account row is deleted
        THEN its positions are deleted too
        """
        replica_repo.replace_all(sample_accounts, fixed_now)

        test_session.query(AccountORM).filter(AccountORM.account_number == "ACC-002").delete()
        test_session.commit()

        remaining = test_session.query(PositionORM.account_number).distinct().all()
        assert [r.account_number for r in remaining] == ["ACC-001"]
