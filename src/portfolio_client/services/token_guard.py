"""Session token expiry checks.

Tokens are JWT-shaped (header.payload.signature). Only the payload's `exp`
claim is inspected; the signature is the server's business. Anything that
cannot be decoded counts as expired so callers route to re-authentication
instead of failing.
"""

import base64
import binascii
import json
from datetime import datetime
from typing import Optional

from portfolio_client.core.timezone import from_timestamp_utc, now_utc


def _decode_segment(segment: str) -> bytes:
    padding = "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(segment + padding)


def token_expiry(token: Optional[str]) -> Optional[datetime]:
    """Return the token's `exp` as an aware UTC datetime, or None if undecodable."""
    if not token:
        return None
    parts = token.split(".")
    if len(parts) != 3 or not parts[1]:
        return None
    try:
        payload = json.loads(_decode_segment(parts[1]))
    except (binascii.Error, ValueError):
        # ValueError covers bad padding, non-ASCII input, UnicodeDecodeError and JSONDecodeError
        return None
    if not isinstance(payload, dict):
        return None
    exp = payload.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return None
    try:
        return from_timestamp_utc(exp)
    except (OverflowError, OSError, ValueError):
        return None


def is_expired(token: Optional[str], now: Optional[datetime] = None) -> bool:
    """True if the token is past its `exp` or cannot be decoded."""
    expiry = token_expiry(token)
    if expiry is None:
        return True
    return expiry <= (now or now_utc())
