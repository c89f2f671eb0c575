"""Cache management endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from portfolio_client.api.deps import get_sync_orchestrator
from portfolio_client.api.routers.portfolio import outcome_json
from portfolio_client.api.schemas import (
    CacheStatusResponse,
    LoadOutcomeResponse,
    ServerCacheResponse,
)
from portfolio_client.services import SyncOrchestrator

router = APIRouter(prefix="/cache", tags=["cache"])


@router.get("/info", response_model=CacheStatusResponse)
def get_cache_info(sync: SyncOrchestrator = Depends(get_sync_orchestrator)) -> CacheStatusResponse:
    """Local replica status plus the server cache description when reachable."""
    status = sync.cache_status()
    server = status.server_cache
    return CacheStatusResponse(
        summary=status.summary,
        last_sync=status.last_sync,
        age_human=status.age_human,
        is_fresh=status.is_fresh,
        accounts_count=status.accounts_count,
        snapshots_count=status.snapshots_count,
        token_expires_at=status.token_expires_at,
        server_cache=ServerCacheResponse(
            status=server.status_description,
            is_valid=server.is_valid,
            created_at=server.created_at,
            age_human=server.age_human,
            expires_in_human=server.expires_in_human,
            ttl_human=server.ttl_human,
            size_human=server.size_human,
            message=server.message,
        ) if server is not None else None,
    )


@router.post("/refresh", response_model=LoadOutcomeResponse)
def refresh_cache(sync: SyncOrchestrator = Depends(get_sync_orchestrator)) -> JSONResponse:
    """Ask the server to rebuild its cache, then reload from the network."""
    return outcome_json(sync.force_server_refresh())


@router.delete("", response_model=LoadOutcomeResponse)
def invalidate_caches(sync: SyncOrchestrator = Depends(get_sync_orchestrator)) -> JSONResponse:
    """Drop the server cache and the local replica, then reload."""
    return outcome_json(sync.invalidate_all_caches())
