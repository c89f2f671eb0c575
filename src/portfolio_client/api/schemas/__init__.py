"""Pydantic schemas for API request/response."""

from portfolio_client.api.schemas.portfolio import (
    PositionResponse,
    AccountResponse,
    AssetClassStatsResponse,
    PerformerResponse,
    PortfolioStatsResponse,
    ErrorDetail,
    LoadOutcomeResponse,
    SnapshotResponse,
    AccountHistoryResponse,
)
from portfolio_client.api.schemas.auth import LoginRequest, SessionResponse
from portfolio_client.api.schemas.cache import ServerCacheResponse, CacheStatusResponse

__all__ = [
    "PositionResponse",
    "AccountResponse",
    "AssetClassStatsResponse",
    "PerformerResponse",
    "PortfolioStatsResponse",
    "ErrorDetail",
    "LoadOutcomeResponse",
    "SnapshotResponse",
    "AccountHistoryResponse",
    "LoginRequest",
    "SessionResponse",
    "ServerCacheResponse",
    "CacheStatusResponse",
]
