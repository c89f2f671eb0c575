"""Pydantic schemas for portfolio and account endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class PositionResponse(BaseModel):
    """Response schema for a single position."""

    model_config = {"from_attributes": True}

    isin_code: str
    instrument_name: str
    market_value: Decimal
    purchase_cost: Decimal
    unrealized_pnl: Decimal
    realized_pnl: Decimal
    performance: Decimal
    weight: Decimal
    quantity: Decimal
    asset_class: str
    reporting_asset_class_code: str
    closing_price: Decimal
    snapshot_date: Optional[datetime] = None


class AccountResponse(BaseModel):
    """Response schema for an account with its positions."""

    model_config = {"from_attributes": True}

    account_number: str
    label: str
    display_label: str
    value: Decimal
    positions: list[PositionResponse]


class AssetClassStatsResponse(BaseModel):
    model_config = {"from_attributes": True}

    total_value: Decimal
    total_weight: Decimal
    weighted_performance: Decimal
    positions_count: int
    average_performance: Decimal
    formatted: dict[str, str] = Field(default_factory=dict)


class PerformerResponse(BaseModel):
    model_config = {"from_attributes": True}

    isin_code: str
    instrument_name: str
    performance: Decimal
    market_value: Decimal
    weight: Decimal
    account_number: str
    asset_class: str
    formatted: dict[str, str] = Field(default_factory=dict)


class PortfolioStatsResponse(BaseModel):
    """Portfolio-wide statistics (network loads only)."""

    model_config = {"from_attributes": True}

    total_value: Decimal
    total_unrealized_pnl: Decimal
    total_realized_pnl: Decimal
    weighted_performance: Decimal
    total_weight: Decimal
    positions_count: int
    accounts_count: int
    performance_by_asset_class: dict[str, AssetClassStatsResponse] = Field(default_factory=dict)
    top_performers: list[PerformerResponse] = Field(default_factory=list)
    worst_performers: list[PerformerResponse] = Field(default_factory=list)
    last_update: Optional[str] = None
    formatted: dict[str, str] = Field(default_factory=dict)


class ErrorDetail(BaseModel):
    code: str
    message: str


class LoadOutcomeResponse(BaseModel):
    """Response schema for one load cycle."""

    source: str
    accounts: list[AccountResponse] = Field(default_factory=list)
    total_value: Decimal = Decimal("0")
    as_of: Optional[datetime] = None
    is_offline: bool = False
    warning: Optional[ErrorDetail] = None
    error: Optional[ErrorDetail] = None
    portfolio_stats: Optional[PortfolioStatsResponse] = None


class SnapshotResponse(BaseModel):
    """Response schema for one point of account history."""

    timestamp: datetime
    value: Decimal
    positions_count: int


class AccountHistoryResponse(BaseModel):
    account_number: str
    snapshots: list[SnapshotResponse]
