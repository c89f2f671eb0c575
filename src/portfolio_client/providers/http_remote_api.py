"""HTTP client for the remote portfolio service."""

import json
import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from portfolio_client.core.exceptions import (
    AuthenticationFailedError,
    DecodeError,
    NetworkError,
    ServerError,
)
from portfolio_client.providers.payloads import (
    ACCOUNT_LIST,
    CacheInfo,
    CacheOperationResult,
    LoginResponse,
    portfolio_stats_from,
)
from portfolio_client.providers.remote_api import AccountsFetch

logger = logging.getLogger(__name__)

_HTML_MARKERS = ("<br />", "<b>Warning</b>", "<html")


def looks_like_html(text: str) -> bool:
    """Return True if a response body is server markup rather than JSON."""
    stripped = text.lstrip()
    if stripped[:9].lower() == "<!doctype":
        return True
    return any(marker in text for marker in _HTML_MARKERS)


class HttpRemoteAPI:
    """
    httpx-backed implementation of RemoteAPI.

    Every request is bounded by the client timeout. Transport failures map to
    NetworkError, non-2xx statuses and HTML bodies to ServerError, and bodies
    that are not the expected JSON to DecodeError.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30.0,
        min_payload_bytes: int = 16,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._min_payload_bytes = min_payload_bytes
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout_seconds,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpRemoteAPI":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # Authentication

    def login(self, user: str, password: str) -> str:
        """POST credentials and return the issued JWT."""
        try:
            response = self._client.post("/login", json={"user": user, "pass": password})
        except httpx.TimeoutException as e:
            raise NetworkError(f"Login timed out: {e}") from e
        except httpx.DecodingError as e:
            raise DecodeError(f"Undecodable login response: {e}") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Login failed, service unreachable: {e}") from e

        if not response.is_success:
            logger.warning(f"Login rejected with status {response.status_code}")
            raise AuthenticationFailedError(f"Login failed with status {response.status_code}")

        try:
            payload = LoginResponse.model_validate(self._decode_json(response))
        except PydanticValidationError as e:
            raise DecodeError(f"Unexpected login response: {e}") from e
        if not payload.jwt:
            raise AuthenticationFailedError("JWT token missing from login response")

        logger.info("Login successful")
        return payload.jwt

    # Accounts

    def fetch_accounts(self, token: str) -> AccountsFetch:
        """GET /accounts, accepting a bare list or the extended response."""
        response = self._request("GET", "/accounts", token)
        data = self._decode_json(response)

        portfolio_raw: Any = None
        if isinstance(data, list):
            accounts_raw = data
        elif isinstance(data, dict) and isinstance(data.get("accounts"), list):
            accounts_raw = data["accounts"]
            portfolio_raw = data.get("portfolio")
        else:
            raise DecodeError("Unexpected accounts payload: expected a list or an object with 'accounts'")

        try:
            payloads = ACCOUNT_LIST.validate_python(accounts_raw)
        except PydanticValidationError as e:
            logger.error(f"Accounts payload failed validation: {e}")
            raise DecodeError(f"Malformed accounts payload: {e}") from e

        portfolio_stats = None
        if portfolio_raw is not None:
            try:
                portfolio_stats = portfolio_stats_from(portfolio_raw)
            except PydanticValidationError as e:
                logger.warning(f"Ignoring malformed portfolio statistics: {e}")

        accounts = [p.to_domain() for p in payloads]
        logger.info(
            f"Fetched {len(accounts)} accounts"
            + (" with portfolio stats" if portfolio_stats else "")
        )
        return AccountsFetch(accounts=accounts, portfolio_stats=portfolio_stats)

    # Server cache management

    def get_cache_info(self, token: str) -> CacheInfo:
        response = self._request("GET", "/cache/info", token)
        return self._validate(CacheInfo, self._decode_json(response))

    def invalidate_cache(self, token: str) -> CacheOperationResult:
        response = self._request("DELETE", "/cache", token)
        return self._validate(CacheOperationResult, self._decode_json(response))

    def refresh_cache(self, token: str) -> CacheOperationResult:
        response = self._request("POST", "/cache/refresh", token)
        return self._validate(CacheOperationResult, self._decode_json(response))

    # Helpers

    def _request(self, method: str, path: str, token: str) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}"}
        logger.debug(f"{method} {path}")
        try:
            response = self._client.request(method, path, headers=headers)
        except httpx.TimeoutException as e:
            raise NetworkError(f"{method} {path} timed out: {e}") from e
        except httpx.DecodingError as e:
            # Body could not be decompressed or decoded
            raise DecodeError(f"{method} {path} returned an undecodable body: {e}") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"{method} {path} failed: {e}") from e

        if response.status_code in (401, 403):
            raise AuthenticationFailedError(
                f"{method} {path} rejected the session token ({response.status_code})"
            )
        if not response.is_success:
            body = response.text
            logger.error(f"{method} {path} returned status {response.status_code}: {body[:500]}")
            code = "SERVER_HTML_RESPONSE" if looks_like_html(body) else "SERVER_ERROR"
            raise ServerError(
                f"{method} {path} returned status {response.status_code}",
                status_code=response.status_code,
                code=code,
            )
        return response

    def _decode_json(self, response: httpx.Response) -> Any:
        body = response.text
        size = len(response.content)
        if size < self._min_payload_bytes:
            logger.warning(f"Suspiciously small response from {response.request.url.path}: {size} bytes")

        if looks_like_html(body):
            logger.error(f"Server returned HTML instead of JSON: {body[:500]}")
            raise ServerError(
                "Server configuration error: received HTML instead of JSON",
                status_code=response.status_code,
                code="SERVER_HTML_RESPONSE",
            )

        try:
            return json.loads(body)
        except (json.JSONDecodeError, RecursionError) as e:
            logger.error(f"JSON decoding error: {e}")
            raise DecodeError(f"Invalid JSON in response: {e}") from e

    @staticmethod
    def _validate(model, data: Any):
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            raise DecodeError(f"Unexpected {model.__name__} payload: {e}") from e
