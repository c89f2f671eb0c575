"""Pydantic schemas for cache management endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ServerCacheResponse(BaseModel):
    """Server-side cache description."""

    status: str
    is_valid: bool
    created_at: Optional[datetime] = None
    age_human: Optional[str] = None
    expires_in_human: Optional[str] = None
    ttl_human: str
    size_human: Optional[str] = None
    message: Optional[str] = None


class CacheStatusResponse(BaseModel):
    """Combined local and server cache status."""

    summary: str
    last_sync: Optional[datetime] = None
    age_human: str
    is_fresh: bool
    accounts_count: Optional[int] = None
    snapshots_count: Optional[int] = None
    token_expires_at: Optional[datetime] = None
    server_cache: Optional[ServerCacheResponse] = None
