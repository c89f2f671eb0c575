"""Application-level exceptions."""

from typing import Optional


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class AuthenticationRequiredError(AppError):
    """Raised when no usable session token is available."""

    def __init__(self, message: str = "Authentication required", code: str = "AUTHENTICATION_REQUIRED"):
        super().__init__(message, code=code)


class AuthenticationFailedError(AuthenticationRequiredError):
    """Raised when the remote service rejects credentials or a token."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTHENTICATION_FAILED")


class RemoteError(AppError):
    """Base class for failures while talking to the remote portfolio service."""


class NetworkError(RemoteError):
    """Raised on connectivity failures and timeouts."""

    def __init__(self, message: str):
        super().__init__(message, code="NETWORK_ERROR")


class ServerError(RemoteError):
    """Raised on non-2xx responses and HTML-shaped bodies."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: str = "SERVER_ERROR",
    ):
        self.status_code = status_code
        super().__init__(message, code=code)


class DecodeError(RemoteError):
    """Raised when a response body is not the expected JSON shape."""

    def __init__(self, message: str):
        super().__init__(message, code="DECODE_ERROR")


class StorageError(AppError):
    """Raised when the local replica cannot be read or written."""

    def __init__(self, message: str):
        super().__init__(message, code="STORAGE_ERROR")
