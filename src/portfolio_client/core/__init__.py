"""Core utilities and shared functionality."""

from portfolio_client.core.timezone import (
    now_utc,
    to_utc,
    to_naive_utc,
    from_timestamp_utc,
    parse_datetime_utc,
    UTC,
)
from portfolio_client.core.exceptions import (
    AppError,
    ValidationError,
    NotFoundError,
    AuthenticationRequiredError,
    AuthenticationFailedError,
    RemoteError,
    NetworkError,
    ServerError,
    DecodeError,
    StorageError,
)

__all__ = [
    "now_utc",
    "to_utc",
    "to_naive_utc",
    "from_timestamp_utc",
    "parse_datetime_utc",
    "UTC",
    "AppError",
    "ValidationError",
    "NotFoundError",
    "AuthenticationRequiredError",
    "AuthenticationFailedError",
    "RemoteError",
    "NetworkError",
    "ServerError",
    "DecodeError",
    "StorageError",
]
