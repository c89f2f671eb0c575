"""Portfolio load endpoints."""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from portfolio_client.api.deps import get_sync_orchestrator
from portfolio_client.api.schemas import (
    AccountResponse,
    ErrorDetail,
    LoadOutcomeResponse,
    PortfolioStatsResponse,
)
from portfolio_client.core.exceptions import AppError
from portfolio_client.domain.views import (
    AuthenticationRequired,
    Failure,
    LoadOutcome,
    OutcomeSource,
    ServedFromExpiredCache,
    ServedFromNetwork,
)
from portfolio_client.services import SyncOrchestrator

router = APIRouter(prefix="/portfolio", tags=["portfolio"])

_STATUS_BY_SOURCE = {
    OutcomeSource.AUTHENTICATION_REQUIRED: 401,
    OutcomeSource.FAILURE: 503,
}


def _error_detail(error: AppError) -> ErrorDetail:
    return ErrorDetail(code=error.code, message=error.message)


def outcome_to_response(outcome: LoadOutcome) -> LoadOutcomeResponse:
    """Convert a LoadOutcome into its API representation."""
    if isinstance(outcome, AuthenticationRequired):
        return LoadOutcomeResponse(
            source=outcome.source.value,
            error=ErrorDetail(code="AUTHENTICATION_REQUIRED", message=outcome.reason),
        )
    if isinstance(outcome, Failure):
        return LoadOutcomeResponse(source=outcome.source.value, error=_error_detail(outcome.error))

    response = LoadOutcomeResponse(
        source=outcome.source.value,
        accounts=[AccountResponse.model_validate(a, from_attributes=True) for a in outcome.accounts],
        total_value=outcome.total_value,
        as_of=outcome.as_of,
        is_offline=outcome.is_offline,
    )
    if isinstance(outcome, ServedFromExpiredCache):
        response.warning = _error_detail(outcome.warning)
    if isinstance(outcome, ServedFromNetwork) and outcome.portfolio_stats is not None:
        response.portfolio_stats = PortfolioStatsResponse.model_validate(
            outcome.portfolio_stats, from_attributes=True
        )
    return response


def outcome_json(outcome: LoadOutcome) -> JSONResponse:
    """JSON response with a status code matching the outcome."""
    return JSONResponse(
        status_code=_STATUS_BY_SOURCE.get(outcome.source, 200),
        content=outcome_to_response(outcome).model_dump(mode="json"),
    )


@router.get("", response_model=LoadOutcomeResponse)
def load_portfolio(
    force_refresh: bool = Query(False, description="Skip the local cache and fetch from the server"),
    sync: SyncOrchestrator = Depends(get_sync_orchestrator),
) -> JSONResponse:
    """Load accounts, from the local cache when fresh, otherwise from the server."""
    return outcome_json(sync.load(force_refresh=force_refresh))
