# app/services/signature.py
"""
Vapi webhook signature verification.

The platform signs `"{timestamp}.{raw body}"` with HMAC-SHA256 using the shared
webhook secret and sends the hex digest alongside the unix timestamp.
"""
from __future__ import annotations

import hashlib
import hmac
import time
from typing import Optional, Union

from app.core.errors import AuthError, ReplayError, SignatureMismatchError

SIGNATURE_HEADER = "X-Vapi-Signature"
TIMESTAMP_HEADER = "X-Vapi-Timestamp"
DEFAULT_TOLERANCE_SECONDS = 300


def compute_signature(secret: str, timestamp: str, body: Union[bytes, str]) -> str:
    if isinstance(body, str):
        body = body.encode("utf-8")
    payload = timestamp.encode("utf-8") + b"." + body
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def verify_webhook_signature(
    signature: Optional[str],
    timestamp: Optional[str],
    body: Union[bytes, str],
    secret: str,
    *,
    now: Optional[float] = None,
    tolerance: int = DEFAULT_TOLERANCE_SECONDS,
) -> None:
    if not signature or not timestamp:
        raise AuthError()

    try:
        sent_at = int(timestamp.strip())
    except ValueError:
        raise AuthError("Malformed webhook timestamp")

    now = time.time() if now is None else now
    if abs(now - sent_at) > tolerance:
        raise ReplayError()

    expected = compute_signature(secret, timestamp.strip(), body)
    if not hmac.compare_digest(expected, signature.strip().lower()):
        raise SignatureMismatchError()
