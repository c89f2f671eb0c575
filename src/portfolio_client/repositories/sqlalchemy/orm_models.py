"""SQLAlchemy ORM model definitions."""

from decimal import Decimal

from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Text,
    ForeignKey,
    Numeric,
)
from sqlalchemy.orm import relationship

from portfolio_client.repositories.sqlalchemy.database import Base


class AccountORM(Base):
    """SQLAlchemy model for Account."""

    __tablename__ = "accounts"

    account_number = Column(String(64), primary_key=True)
    label = Column(String(255), nullable=False, default="")
    value = Column(Numeric(precision=18, scale=2), nullable=False, default=Decimal("0"))

    positions = relationship(
        "PositionORM",
        back_populates="account",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PositionORM.id",
    )


class PositionORM(Base):
    """SQLAlchemy model for Position (owned by one account)."""

    __tablename__ = "positions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_number = Column(
        String(64),
        ForeignKey("accounts.account_number", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    isin_code = Column(String(32), nullable=False)
    instrument_name = Column(String(255), nullable=False)
    market_value = Column(Numeric(precision=18, scale=4), default=Decimal("0"))
    purchase_cost = Column(Numeric(precision=18, scale=4), default=Decimal("0"))
    unrealized_pnl = Column(Numeric(precision=18, scale=4), default=Decimal("0"))
    realized_pnl = Column(Numeric(precision=18, scale=4), default=Decimal("0"))
    performance = Column(Numeric(precision=12, scale=4), default=Decimal("0"))
    weight = Column(Numeric(precision=12, scale=4), default=Decimal("0"))
    quantity = Column(Numeric(precision=18, scale=8), default=Decimal("0"))
    asset_class = Column(String(64), default="")
    reporting_asset_class_code = Column(String(64), default="")
    closing_price = Column(Numeric(precision=18, scale=6), default=Decimal("0"))
    snapshot_date = Column(DateTime, nullable=True)

    account = relationship("AccountORM", back_populates="positions")


class SnapshotORM(Base):
    """SQLAlchemy model for Snapshot (append-only sync history)."""

    __tablename__ = "snapshots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime, nullable=False, index=True)
    account_number = Column(String(64), nullable=False, index=True)
    value = Column(Numeric(precision=18, scale=2), nullable=False)
    positions_json = Column(Text, nullable=False, default="[]")
