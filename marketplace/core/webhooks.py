# marketplace/core/webhooks.py
"""
Identity webhook signature verification (Standard Webhooks / Svix scheme).

Signed content:  "{msg_id}.{timestamp}.{raw_body}"
Signature:       base64(HMAC-SHA256(secret, signed_content)), sent as one or
                 more space-separated "v1,<signature>" entries.
Secret:          "whsec_<base64 key>" as shown in the provider dashboard.

Verification runs before the body is even parsed, so an unsigned or
tampered event never reaches identity sync.
"""

import base64
import binascii
import hashlib
import hmac
import time
from typing import Mapping

from marketplace.core.errors import WebhookVerificationError

SECRET_PREFIX = "whsec_"


def _header(headers: Mapping[str, str], name: str) -> str | None:
    # Providers send either the "webhook-*" or the older "svix-*" names
    return headers.get(f"webhook-{name}") or headers.get(f"svix-{name}")


def _secret_bytes(secret: str) -> bytes:
    if secret.startswith(SECRET_PREFIX):
        secret = secret[len(SECRET_PREFIX) :]
    try:
        return base64.b64decode(secret)
    except binascii.Error:
        return secret.encode("utf-8")


def sign(secret: str, msg_id: str, timestamp: str, body: bytes) -> str:
    """Return the "v1,<signature>" value for a payload."""
    signed = f"{msg_id}.{timestamp}.".encode("utf-8") + body
    digest = hmac.new(_secret_bytes(secret), signed, hashlib.sha256).digest()
    return "v1," + base64.b64encode(digest).decode("ascii")


def verify_webhook(
    body: bytes,
    headers: Mapping[str, str],
    secret: str,
    tolerance_seconds: int = 300,
    now: float | None = None,
) -> None:
    """
    Raises:
        WebhookVerificationError: missing headers, stale timestamp, or no
        matching signature.
    """
    msg_id = _header(headers, "id")
    timestamp = _header(headers, "timestamp")
    signatures = _header(headers, "signature")

    if not msg_id or not timestamp or not signatures:
        raise WebhookVerificationError(detail="Missing webhook signature headers")

    try:
        sent_at = int(timestamp)
    except ValueError:
        raise WebhookVerificationError(detail="Invalid webhook timestamp")

    now = time.time() if now is None else now
    if abs(now - sent_at) > tolerance_seconds:
        raise WebhookVerificationError(detail="Webhook timestamp outside tolerance")

    expected = sign(secret, msg_id, timestamp, body)
    for candidate in signatures.split():
        if hmac.compare_digest(candidate, expected):
            return

    raise WebhookVerificationError(detail="Invalid webhook signature")
