"""Sync orchestrator: decides between the local replica and the remote service."""

import logging
import threading
from concurrent.futures import Future
from datetime import datetime, timedelta
from typing import Callable, Optional

from portfolio_client.core.exceptions import (
    AppError,
    AuthenticationFailedError,
    NotFoundError,
    RemoteError,
    StorageError,
)
from portfolio_client.core.timezone import now_utc
from portfolio_client.domain.models import Account, Position, Snapshot, total_value
from portfolio_client.domain.views import (
    AuthenticationRequired,
    CacheStatus,
    Failure,
    LoadOutcome,
    ServedFromCache,
    ServedFromExpiredCache,
    ServedFromNetwork,
)
from portfolio_client.providers.credential_store import CredentialStore
from portfolio_client.providers.remote_api import RemoteAPI
from portfolio_client.repositories.protocols import ReplicaRepository
from portfolio_client.services.freshness import (
    CACHE_VALIDITY,
    cache_age,
    format_age,
    is_fresh,
    should_use_cache,
)
from portfolio_client.services.token_guard import is_expired, token_expiry

logger = logging.getLogger(__name__)

OutcomeListener = Callable[[LoadOutcome], None]


class SyncOrchestrator:
    """
    Load/refresh/fallback protocol for the portfolio screens.

    Each load cycle checks the session token, serves fresh local data when
    the replica is younger than the validity window, and otherwise fetches
    from the remote service and replaces the replica. When the fetch fails
    the replica is served regardless of age, and only an empty replica turns
    into a Failure.

    Overlapping load() calls are coalesced: a call made while a cycle is in
    flight waits for that cycle and returns its outcome. Cycles are numbered,
    and an outcome is published to listeners only if no newer cycle has
    already published.
    """

    def __init__(
        self,
        remote_api: RemoteAPI,
        credential_store: CredentialStore,
        replica_repo: ReplicaRepository,
        clock: Callable[[], datetime] = now_utc,
        cache_validity: timedelta = CACHE_VALIDITY,
    ):
        self._remote = remote_api
        self._credentials = credential_store
        self._replica = replica_repo
        self._clock = clock
        self._validity = cache_validity

        self._lock = threading.Lock()
        # Serializes every replica access; the session is not thread-safe.
        self._store_lock = threading.RLock()
        self._in_flight: Optional[Future] = None
        self._sequence = 0
        self._published_sequence = 0
        self._latest_outcome: Optional[LoadOutcome] = None
        self._is_loading = False
        self._listeners: list[OutcomeListener] = []

    # Observable state

    @property
    def is_loading(self) -> bool:
        """True while a cycle is between the cache check and its outcome."""
        return self._is_loading

    @property
    def latest_outcome(self) -> Optional[LoadOutcome]:
        """Outcome of the newest completed cycle."""
        return self._latest_outcome

    def subscribe(self, listener: OutcomeListener) -> Callable[[], None]:
        """
        Register a listener called with every published outcome.

        Listeners run on the thread that completed the cycle. Returns a
        function that removes the listener.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # Load protocol

    def load(self, force_refresh: bool = False) -> LoadOutcome:
        """Run one load cycle, or join the one already in flight."""
        with self._lock:
            in_flight = self._in_flight
            if in_flight is None:
                future: Future = Future()
                self._in_flight = future
                self._sequence += 1
                sequence = self._sequence

        if in_flight is not None:
            logger.info("Load already in progress; waiting for its outcome")
            return in_flight.result()

        try:
            outcome = self._run_cycle(force_refresh)
        except BaseException as e:
            future.set_exception(e)
            raise
        finally:
            with self._lock:
                self._in_flight = None

        future.set_result(outcome)
        self._publish(sequence, outcome)
        return outcome

    def _run_cycle(self, force_refresh: bool) -> LoadOutcome:
        token = self._usable_token()
        if token is None:
            logger.info("No valid session token; authentication required")
            return AuthenticationRequired()

        self._is_loading = True
        try:
            now = self._clock()

            if not force_refresh:
                cached = self._serve_fresh_cache(now)
                if cached is not None:
                    return cached

            try:
                fetch = self._remote.fetch_accounts(token)
            except AuthenticationFailedError as e:
                logger.warning(f"Session token rejected by server: {e.message}")
                self._forget_token()
                return AuthenticationRequired(reason=e.message)
            except RemoteError as e:
                return self._serve_expired_cache(e)

            try:
                with self._store_lock:
                    self._replica.replace_all(fetch.accounts, now)
            except StorageError as e:
                logger.error(f"Could not persist fetched accounts: {e.message}")
                return Failure(error=e)

            logger.info(f"Served {len(fetch.accounts)} accounts from network")
            return ServedFromNetwork(
                accounts=fetch.accounts,
                total_value=total_value(fetch.accounts),
                as_of=now,
                portfolio_stats=fetch.portfolio_stats,
            )
        finally:
            self._is_loading = False

    def _serve_fresh_cache(self, now: datetime) -> Optional[ServedFromCache]:
        try:
            with self._store_lock:
                last_sync = self._replica.most_recent_snapshot_timestamp()
                if not should_use_cache(last_sync, now, False, self._validity):
                    return None
                accounts = self._replica.load_cached_accounts()
        except StorageError as e:
            logger.warning(f"Local cache unreadable, fetching from network: {e.message}")
            return None

        logger.info(f"Served {len(accounts)} accounts from fresh cache (synced {last_sync})")
        return ServedFromCache(
            accounts=accounts,
            total_value=total_value(accounts),
            as_of=last_sync,
        )

    def _serve_expired_cache(self, error: RemoteError) -> LoadOutcome:
        logger.warning(f"Fetch failed ({error.code}): {error.message}; falling back to local cache")
        try:
            with self._store_lock:
                accounts = self._replica.load_cached_accounts()
                as_of = self._replica.most_recent_snapshot_timestamp()
        except StorageError as e:
            logger.error(f"Fallback read failed: {e.message}")
            return Failure(error=error)

        if not accounts:
            logger.error("No cached data to fall back on")
            return Failure(error=error)

        logger.info(f"Served {len(accounts)} accounts from expired cache (synced {as_of})")
        return ServedFromExpiredCache(
            accounts=accounts,
            total_value=total_value(accounts),
            as_of=as_of,
            warning=error,
        )

    def _usable_token(self) -> Optional[str]:
        try:
            token = self._credentials.retrieve()
        except StorageError as e:
            logger.error(f"Could not read session token: {e.message}")
            return None
        if token is None or is_expired(token, self._clock()):
            return None
        return token

    def _forget_token(self) -> None:
        try:
            self._credentials.delete()
        except StorageError as e:
            logger.error(f"Could not delete rejected session token: {e.message}")

    def _publish(self, sequence: int, outcome: LoadOutcome) -> None:
        with self._lock:
            if sequence <= self._published_sequence:
                logger.debug(f"Discarding outcome of superseded load #{sequence}")
                return
            self._published_sequence = sequence
            self._latest_outcome = outcome
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(outcome)
            except Exception:
                logger.exception("Outcome listener failed")

    # Cache management

    def cache_status(self) -> CacheStatus:
        """Local replica state plus the server cache description when reachable."""
        now = self._clock()
        try:
            with self._store_lock:
                last_sync = self._replica.most_recent_snapshot_timestamp()
                accounts_count = self._replica.count_accounts()
                snapshots_count = self._replica.count_snapshots()
        except StorageError as e:
            logger.warning(f"Local cache status unavailable: {e.message}")
            last_sync, accounts_count, snapshots_count = None, None, None

        token = self._usable_token()
        server_cache = None
        if token is not None:
            try:
                server_cache = self._remote.get_cache_info(token)
            except AppError as e:
                logger.warning(f"Server cache info unavailable: {e.message}")

        age = cache_age(last_sync, now)
        return CacheStatus(
            last_sync=last_sync,
            age=age,
            age_human=format_age(age),
            is_fresh=is_fresh(last_sync, now, self._validity),
            accounts_count=accounts_count,
            snapshots_count=snapshots_count,
            token_expires_at=token_expiry(token),
            server_cache=server_cache,
        )

    def force_server_refresh(self) -> LoadOutcome:
        """Ask the server to rebuild its cache, then reload from the network."""
        token = self._usable_token()
        if token is None:
            return AuthenticationRequired()
        try:
            result = self._remote.refresh_cache(token)
            logger.info(f"Server cache refresh: {result.message}")
        except AppError as e:
            logger.warning(f"Server cache refresh failed: {e.message}")
        return self.load(force_refresh=True)

    def invalidate_all_caches(self) -> LoadOutcome:
        """Drop the server cache and the local replica, then reload."""
        token = self._usable_token()
        if token is None:
            return AuthenticationRequired()
        try:
            result = self._remote.invalidate_cache(token)
            logger.info(f"Server cache invalidated: {result.message}")
        except AppError as e:
            logger.warning(f"Server cache invalidation failed: {e.message}")
        try:
            with self._store_lock:
                self._replica.clear()
        except StorageError as e:
            logger.error(f"Could not clear local replica: {e.message}")
            return Failure(error=e)
        return self.load(force_refresh=True)

    # Account detail

    def get_account(self, account_number: str) -> Account:
        with self._store_lock:
            account = self._replica.get_account(account_number)
        if account is None:
            raise NotFoundError("Account", account_number)
        return account

    def account_history(self, account_number: str) -> list[Snapshot]:
        """Snapshots of one account in ascending time order."""
        with self._store_lock:
            return self._replica.list_snapshots(account_number)

    def snapshot_positions(self, snapshot: Snapshot) -> list[Position]:
        with self._store_lock:
            return self._replica.snapshot_positions(snapshot)
