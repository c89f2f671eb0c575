"""Cached account detail endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from portfolio_client.api.deps import get_sync_orchestrator
from portfolio_client.api.schemas import (
    AccountHistoryResponse,
    AccountResponse,
    SnapshotResponse,
)
from portfolio_client.core.exceptions import NotFoundError
from portfolio_client.services import SyncOrchestrator

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get("/{account_number}", response_model=AccountResponse)
def get_account(
    account_number: str,
    sync: SyncOrchestrator = Depends(get_sync_orchestrator),
) -> AccountResponse:
    """Get one cached account with its positions."""
    try:
        account = sync.get_account(account_number)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return AccountResponse.model_validate(account, from_attributes=True)


@router.get("/{account_number}/history", response_model=AccountHistoryResponse)
def get_account_history(
    account_number: str,
    sync: SyncOrchestrator = Depends(get_sync_orchestrator),
) -> AccountHistoryResponse:
    """Get the value history of one account, oldest first."""
    snapshots = sync.account_history(account_number)
    if not snapshots:
        try:
            sync.get_account(account_number)
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=e.message)
    return AccountHistoryResponse(
        account_number=account_number,
        snapshots=[
            SnapshotResponse(
                timestamp=s.timestamp,
                value=s.value,
                positions_count=len(sync.snapshot_positions(s)),
            )
            for s in snapshots
        ],
    )
