"""Login and logout endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Response

from portfolio_client.api.deps import get_auth_service
from portfolio_client.api.schemas import LoginRequest, SessionResponse
from portfolio_client.core.exceptions import AuthenticationRequiredError, NetworkError
from portfolio_client.services import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=SessionResponse)
def login(
    data: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
) -> SessionResponse:
    """Exchange credentials for a session token."""
    try:
        auth.login(data.user, data.password)
    except AuthenticationRequiredError as e:
        raise HTTPException(status_code=401, detail=e.message)
    except NetworkError as e:
        raise HTTPException(status_code=503, detail=e.message)
    return SessionResponse(logged_in=True, expires_at=auth.token_expires_at())


@router.get("/session", response_model=SessionResponse)
def get_session_state(auth: AuthService = Depends(get_auth_service)) -> SessionResponse:
    """Describe the current session."""
    logged_in = auth.is_logged_in()
    return SessionResponse(
        logged_in=logged_in,
        expires_at=auth.token_expires_at() if logged_in else None,
    )


@router.post("/logout", status_code=204)
def logout(auth: AuthService = Depends(get_auth_service)) -> Response:
    """Forget the stored session token."""
    auth.logout()
    return Response(status_code=204)
