"""Remote service and credential providers."""

from portfolio_client.providers.remote_api import RemoteAPI, AccountsFetch
from portfolio_client.providers.http_remote_api import HttpRemoteAPI, looks_like_html
from portfolio_client.providers.credential_store import CredentialStore, FileCredentialStore
from portfolio_client.providers.payloads import CacheInfo, CacheOperationResult

__all__ = [
    "RemoteAPI",
    "AccountsFetch",
    "HttpRemoteAPI",
    "looks_like_html",
    "CredentialStore",
    "FileCredentialStore",
    "CacheInfo",
    "CacheOperationResult",
]
