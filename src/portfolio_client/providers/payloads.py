"""Pydantic models for the remote portfolio service wire format.

The service speaks camelCase (and partly French) JSON keys; the models expose
them under descriptive attribute names and convert to domain objects.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, TypeAdapter

from portfolio_client.core.timezone import parse_datetime_utc, to_naive_utc, to_utc
from portfolio_client.domain.models import Account, Position
from portfolio_client.domain.views import AssetClassStats, PerformerPosition, PortfolioStats

DEFAULT_SERVER_CACHE_TTL = 21600

# Amounts travel as JSON numbers; keep them numbers when re-serialized.
Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class WireModel(BaseModel):
    """Base for all wire models: accept aliases or names, ignore unknown keys."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PositionPayload(WireModel):
    """One position as returned inside an account."""

    isin_code: str = Field(alias="isinCode")
    instrument_name: str = Field(alias="libInstrument")
    purchase_cost: Amount = Field(default=Decimal("0"), alias="valorisationAchatNette")
    market_value: Amount = Field(alias="valeurMarcheDeviseSecurite")
    snapshot_date: Optional[datetime] = Field(default=None, alias="dateArrete")
    quantity: Amount = Field(default=Decimal("0"), alias="quantityMinute")
    unrealized_pnl: Amount = Field(default=Decimal("0"), alias="pmvl")
    realized_pnl: Amount = Field(default=Decimal("0"), alias="pmvr")
    weight: Amount = Field(default=Decimal("0"), alias="weightMinute")
    reporting_asset_class_code: str = Field(default="", alias="reportingAssetClassCode")
    performance: Amount = Field(default=Decimal("0"), alias="performance")
    asset_class: str = Field(default="", alias="classActif")
    closing_price: Amount = Field(default=Decimal("0"), alias="closingPriceInListingCurrency")

    def to_domain(self, account_number: Optional[str] = None) -> Position:
        return Position(
            isin_code=self.isin_code,
            instrument_name=self.instrument_name,
            market_value=self.market_value,
            purchase_cost=self.purchase_cost,
            unrealized_pnl=self.unrealized_pnl,
            realized_pnl=self.realized_pnl,
            performance=self.performance,
            weight=self.weight,
            quantity=self.quantity,
            asset_class=self.asset_class,
            reporting_asset_class_code=self.reporting_asset_class_code,
            closing_price=self.closing_price,
            snapshot_date=to_utc(self.snapshot_date) if self.snapshot_date else None,
            account_number=account_number,
        )

    @classmethod
    def from_domain(cls, position: Position) -> "PositionPayload":
        return cls(
            isin_code=position.isin_code,
            instrument_name=position.instrument_name,
            purchase_cost=position.purchase_cost,
            market_value=position.market_value,
            snapshot_date=to_naive_utc(position.snapshot_date) if position.snapshot_date else None,
            quantity=position.quantity,
            unrealized_pnl=position.unrealized_pnl,
            realized_pnl=position.realized_pnl,
            weight=position.weight,
            reporting_asset_class_code=position.reporting_asset_class_code,
            performance=position.performance,
            asset_class=position.asset_class,
            closing_price=position.closing_price,
        )


class AccountStatsPayload(WireModel):
    """Per-account statistics in the extended response."""

    total_unrealized_pnl: Amount = Field(default=Decimal("0"), alias="totalPMVL")
    weighted_performance: Amount = Field(default=Decimal("0"), alias="weightedPerformance")
    total_weight: Amount = Field(default=Decimal("0"), alias="totalWeight")
    positions_count: int = Field(default=0, alias="positionsCount")
    formatted: dict[str, str] = Field(default_factory=dict)


class AccountPayload(WireModel):
    """One account with its positions."""

    account_number: str = Field(alias="accountNumber")
    label: str = ""
    value: Amount
    positions: list[PositionPayload] = Field(default_factory=list)
    stats: Optional[AccountStatsPayload] = None

    def to_domain(self) -> Account:
        return Account(
            account_number=self.account_number,
            label=self.label,
            value=self.value,
            positions=[p.to_domain(self.account_number) for p in self.positions],
        )


class AssetClassStatsPayload(WireModel):
    total_value: Amount = Field(alias="totalValue")
    total_weight: Amount = Field(default=Decimal("0"), alias="totalWeight")
    weighted_performance: Amount = Field(default=Decimal("0"), alias="weightedPerformance")
    positions_count: int = Field(default=0, alias="positionsCount")
    average_performance: Amount = Field(default=Decimal("0"), alias="averagePerformance")
    formatted: dict[str, str] = Field(default_factory=dict)

    def to_domain(self) -> AssetClassStats:
        return AssetClassStats(
            total_value=self.total_value,
            total_weight=self.total_weight,
            weighted_performance=self.weighted_performance,
            positions_count=self.positions_count,
            average_performance=self.average_performance,
            formatted=dict(self.formatted),
        )


class PerformerPayload(WireModel):
    isin_code: str = Field(alias="isinCode")
    instrument_name: str = Field(alias="libInstrument")
    performance: Amount
    market_value: Amount = Field(alias="valeurMarcheDeviseSecurite")
    weight: Amount = Field(default=Decimal("0"), alias="weightMinute")
    account_number: str = Field(alias="accountNumber")
    asset_class: str = Field(default="", alias="classActif")
    formatted: dict[str, str] = Field(default_factory=dict)

    def to_domain(self) -> PerformerPosition:
        return PerformerPosition(
            isin_code=self.isin_code,
            instrument_name=self.instrument_name,
            performance=self.performance,
            market_value=self.market_value,
            weight=self.weight,
            account_number=self.account_number,
            asset_class=self.asset_class,
            formatted=dict(self.formatted),
        )


class PortfolioStatsPayload(WireModel):
    """Portfolio-wide statistics in the extended response."""

    total_value: Amount = Field(alias="totalValue")
    total_unrealized_pnl: Amount = Field(default=Decimal("0"), alias="totalPMVL")
    total_realized_pnl: Amount = Field(default=Decimal("0"), alias="totalPMVR")
    weighted_performance: Amount = Field(default=Decimal("0"), alias="weightedPerformance")
    total_weight: Amount = Field(default=Decimal("0"), alias="totalWeight")
    positions_count: int = Field(default=0, alias="positionsCount")
    accounts_count: int = Field(default=0, alias="accountsCount")
    performance_by_asset_class: dict[str, AssetClassStatsPayload] = Field(
        default_factory=dict, alias="performanceByAssetClass"
    )
    top_performers: list[PerformerPayload] = Field(default_factory=list, alias="topPerformers")
    worst_performers: list[PerformerPayload] = Field(default_factory=list, alias="worstPerformers")
    last_update: Optional[str] = Field(default=None, alias="lastUpdate")
    formatted: dict[str, str] = Field(default_factory=dict)

    def to_domain(self) -> PortfolioStats:
        return PortfolioStats(
            total_value=self.total_value,
            total_unrealized_pnl=self.total_unrealized_pnl,
            total_realized_pnl=self.total_realized_pnl,
            weighted_performance=self.weighted_performance,
            total_weight=self.total_weight,
            positions_count=self.positions_count,
            accounts_count=self.accounts_count,
            performance_by_asset_class={
                name: stats.to_domain() for name, stats in self.performance_by_asset_class.items()
            },
            top_performers=[p.to_domain() for p in self.top_performers],
            worst_performers=[p.to_domain() for p in self.worst_performers],
            last_update=self.last_update,
            formatted=dict(self.formatted),
        )


class LoginResponse(WireModel):
    jwt: Optional[str] = None


def format_file_size(size: int) -> str:
    """Human-readable byte count, e.g. 1536 -> '1.5 KB'."""
    units = ["B", "KB", "MB", "GB"]
    value = float(size)
    unit_index = 0
    while value >= 1024 and unit_index < len(units) - 1:
        value /= 1024
        unit_index += 1
    return f"{value:.1f} {units[unit_index]}"


class CacheInfo(WireModel):
    """Server-side cache introspection (GET /cache/info)."""

    key: Optional[str] = None
    timestamp: Optional[str] = None
    age: Optional[int] = None
    age_human: Optional[str] = Field(default=None, alias="ageHuman")
    ttl: Optional[int] = None
    is_expired: Optional[bool] = Field(default=None, alias="isExpired")
    expires_in: Optional[int] = Field(default=None, alias="expiresIn")
    expires_in_human: Optional[str] = Field(default=None, alias="expiresInHuman")
    size: Optional[int] = None
    message: Optional[str] = None

    @property
    def cache_exists(self) -> bool:
        return bool(self.timestamp)

    @property
    def is_valid(self) -> bool:
        if self.is_expired is None:
            return False
        return not self.is_expired and self.cache_exists

    @property
    def status_description(self) -> str:
        if not self.cache_exists:
            return "No cache"
        if self.is_expired is None:
            return "Unknown"
        return "Expired" if self.is_expired else "Valid"

    @property
    def ttl_human(self) -> str:
        ttl = self.ttl if self.ttl is not None else DEFAULT_SERVER_CACHE_TTL
        return f"{ttl // 3600}h {(ttl % 3600) // 60}m"

    @property
    def size_human(self) -> Optional[str]:
        if self.size is None:
            return None
        return format_file_size(self.size)

    @property
    def created_at(self) -> Optional[datetime]:
        """Parsed server timestamp, or None when absent or unparseable."""
        if not self.timestamp:
            return None
        try:
            return parse_datetime_utc(self.timestamp)
        except (ValueError, OverflowError):
            return None


class CacheOperationResult(WireModel):
    """Result of a server cache refresh or invalidation."""

    success: bool
    message: str
    cache_path: Optional[str] = Field(default=None, alias="cachePath")
    timestamp: str
    accounts_count: Optional[int] = Field(default=None, alias="accountsCount")
    user_id: Optional[str] = Field(default=None, alias="userId")


ACCOUNT_LIST = TypeAdapter(list[AccountPayload])
POSITION_LIST = TypeAdapter(list[PositionPayload])


def dump_positions(positions: list[Position]) -> str:
    """Serialize positions in the wire format (used for snapshots)."""
    payloads = [PositionPayload.from_domain(p) for p in positions]
    return POSITION_LIST.dump_json(payloads, by_alias=True).decode("utf-8")


def load_positions(data: str, account_number: Optional[str] = None) -> list[Position]:
    """Deserialize positions written by dump_positions."""
    return [p.to_domain(account_number) for p in POSITION_LIST.validate_json(data or "[]")]


def portfolio_stats_from(raw: Any) -> PortfolioStats:
    """Validate a raw portfolio stats object; raises pydantic.ValidationError."""
    return PortfolioStatsPayload.model_validate(raw).to_domain()
