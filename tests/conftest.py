"""
Pytest configuration and fixtures for portfolio client tests.

This module provides:
- In-memory SQLite database fixtures
- Session token factories
- A scriptable fake remote service and in-memory credential store
- Factory helpers for accounts and positions
- Service, repository and API client fixtures
"""

import base64
import json
import threading
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import StaticPool
from sqlalchemy.orm import Session, sessionmaker

from portfolio_client.api.deps import get_context
from portfolio_client.app_context import AppContext, set_app_context
from portfolio_client.config.settings import reset_settings
from portfolio_client.core.exceptions import AppError, ServerError, StorageError
from portfolio_client.core.timezone import UTC
from portfolio_client.domain.models import Account, Position
from portfolio_client.domain.views import PortfolioStats
from portfolio_client.main import app
from portfolio_client.providers.payloads import CacheInfo, CacheOperationResult
from portfolio_client.providers.remote_api import AccountsFetch
from portfolio_client.repositories.sqlalchemy import SqlAlchemyReplicaRepository
from portfolio_client.repositories.sqlalchemy.database import Base, create_sqlite_engine
# Import ORM models to register them with Base before creating tables
from portfolio_client.repositories.sqlalchemy import orm_models  # noqa: F401
from portfolio_client.services import AuthService, SyncOrchestrator


# =============================================================================
# TIME HELPERS
# =============================================================================


def utc_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create an aware UTC datetime."""
    return UTC.localize(datetime(year, month, day, hour, minute, second))


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed 'now' timestamp for deterministic tests."""
    return utc_datetime(2024, 6, 15, 14, 30, 0)


class FakeClock:
    """Clock whose time only moves when a test moves it."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


# =============================================================================
# TOKEN HELPERS
# =============================================================================


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def make_token(exp=None, claims: Optional[dict] = None) -> str:
    """Build an unsigned JWT-shaped token with the given exp claim."""
    payload = dict(claims or {})
    if exp is not None:
        payload["exp"] = int(exp.timestamp()) if isinstance(exp, datetime) else exp
    header = _b64url(json.dumps({"alg": "HS256", "typ": "JWT"}).encode("utf-8"))
    body = _b64url(json.dumps(payload).encode("utf-8"))
    return f"{header}.{body}.signature"


@pytest.fixture
def valid_token() -> str:
    """Token valid for one hour past real time."""
    return make_token(exp=datetime.now(UTC) + timedelta(hours=1), claims={"sub": "alice"})


@pytest.fixture
def expired_token() -> str:
    return make_token(exp=datetime.now(UTC) - timedelta(hours=1))


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    # Reset settings for clean state
    reset_settings()

    engine = create_sqlite_engine("sqlite:///:memory:", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_session(test_engine) -> Session:
    """Create test database session."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def replica_repo(test_session) -> SqlAlchemyReplicaRepository:
    """Provide test ReplicaRepository."""
    return SqlAlchemyReplicaRepository(test_session)


# =============================================================================
# REMOTE SERVICE FAKES
# =============================================================================


class FakeRemoteAPI:
    """
    Scriptable in-memory remote service.

    Set `accounts` to what the next fetch returns, or `fetch_error` to an
    exception it raises. Every call is counted.
    """

    def __init__(self):
        self.accounts: list[Account] = []
        self.portfolio_stats: Optional[PortfolioStats] = None
        self.fetch_error: Optional[Exception] = None
        self.login_error: Optional[Exception] = None
        self.cache_error: Optional[Exception] = None
        self.issued_token: str = make_token(exp=datetime.now(UTC) + timedelta(hours=1))
        self.cache_info = CacheInfo(
            timestamp="2024-06-15T10:00:00Z", ttl=21600, is_expired=False, size=2048
        )
        # Optional hook run inside fetch_accounts (e.g. to block on an event)
        self.on_fetch: Optional[Callable[[], None]] = None

        self.fetch_count = 0
        self.login_count = 0
        self.refresh_count = 0
        self.invalidate_count = 0
        self.tokens_seen: list[str] = []
        self._lock = threading.Lock()

    def login(self, user: str, password: str) -> str:
        self.login_count += 1
        if self.login_error is not None:
            raise self.login_error
        return self.issued_token

    def fetch_accounts(self, token: str) -> AccountsFetch:
        with self._lock:
            self.fetch_count += 1
            self.tokens_seen.append(token)
        if self.on_fetch is not None:
            self.on_fetch()
        if self.fetch_error is not None:
            raise self.fetch_error
        return AccountsFetch(accounts=list(self.accounts), portfolio_stats=self.portfolio_stats)

    def get_cache_info(self, token: str) -> CacheInfo:
        if self.cache_error is not None:
            raise self.cache_error
        return self.cache_info

    def invalidate_cache(self, token: str) -> CacheOperationResult:
        self.invalidate_count += 1
        if self.cache_error is not None:
            raise self.cache_error
        return CacheOperationResult(
            success=True, message="Cache invalidated", timestamp="2024-06-15T10:00:00Z"
        )

    def refresh_cache(self, token: str) -> CacheOperationResult:
        self.refresh_count += 1
        if self.cache_error is not None:
            raise self.cache_error
        return CacheOperationResult(
            success=True, message="Cache refreshed", timestamp="2024-06-15T10:00:00Z"
        )


class InMemoryCredentialStore:
    """Credential store kept in memory."""

    def __init__(self, token: Optional[str] = None):
        self.token = token
        self.delete_count = 0

    def save(self, token: str) -> None:
        self.token = token

    def retrieve(self) -> Optional[str]:
        return self.token

    def delete(self) -> None:
        self.delete_count += 1
        self.token = None


class FailingCredentialStore(InMemoryCredentialStore):
    """Credential store whose reads always fail."""

    def retrieve(self) -> Optional[str]:
        raise StorageError("keychain unavailable")


@pytest.fixture
def remote_api() -> FakeRemoteAPI:
    return FakeRemoteAPI()


@pytest.fixture
def credential_store(valid_token) -> InMemoryCredentialStore:
    """Credential store holding a valid token."""
    return InMemoryCredentialStore(valid_token)


# =============================================================================
# FACTORY HELPERS
# =============================================================================


def make_position(
    isin_code: str = "FR0000120271",
    instrument_name: str = "TotalEnergies",
    market_value: str = "1500",
    performance: str = "2.5",
    **kwargs,
) -> Position:
    """Helper to create a Position with sensible defaults."""
    return Position(
        isin_code=isin_code,
        instrument_name=instrument_name,
        market_value=Decimal(market_value),
        performance=Decimal(performance),
        **kwargs,
    )


def make_account(
    account_number: str = "ACC-001",
    label: str = "PEA",
    value: str = "1500",
    positions: Optional[list[Position]] = None,
) -> Account:
    """Helper to create an Account with one position by default."""
    if positions is None:
        positions = [make_position(market_value=value)]
    return Account(
        account_number=account_number,
        label=label,
        value=Decimal(value),
        positions=positions,
    )


@pytest.fixture
def sample_accounts() -> list[Account]:
    """Two accounts worth 1500 and 2500."""
    return [
        make_account("ACC-001", "PEA", "1500"),
        make_account(
            "ACC-002",
            "Compte-titres",
            "2500",
            positions=[
                make_position("US0378331005", "Apple", "2000", "12.5"),
                make_position("FR0000131104", "BNP Paribas", "500", "-3.25"),
            ],
        ),
    ]


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def orchestrator(remote_api, credential_store, replica_repo, clock) -> SyncOrchestrator:
    """Provide test SyncOrchestrator on a fake clock."""
    return SyncOrchestrator(
        remote_api=remote_api,
        credential_store=credential_store,
        replica_repo=replica_repo,
        clock=clock,
    )


@pytest.fixture
def auth_service(remote_api) -> AuthService:
    """Provide AuthService with an empty credential store."""
    return AuthService(remote_api=remote_api, credential_store=InMemoryCredentialStore())


# =============================================================================
# API TEST CLIENT FIXTURE
# =============================================================================


@pytest.fixture
def api_context(tmp_path, remote_api, credential_store) -> AppContext:
    """AppContext on a temporary data directory with fake collaborators."""
    reset_settings()
    context = AppContext(
        data_dir=tmp_path,
        remote_api=remote_api,
        credential_store=credential_store,
    )
    context.initialize()
    set_app_context(context)
    yield context
    context.close()
    set_app_context(None)
    reset_settings()


@pytest.fixture
def client(api_context) -> TestClient:
    """Provide FastAPI test client bound to the test context."""
    app.dependency_overrides[get_context] = lambda: api_context
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# =============================================================================
# HELPER FUNCTIONS (exported for use in tests)
# =============================================================================


def server_error(message: str = "Service unavailable") -> AppError:
    return ServerError(message, status_code=503)
