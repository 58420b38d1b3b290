"""HMAC-SHA256 verification of inbound webhook bodies."""

import hashlib
import hmac

from app.api.exceptions import WebhookSignatureError

SIGNATURE_HEADER = "x-webhook-signature"
SIGNATURE_PREFIX = "sha256="


def compute_signature(raw_body: bytes, secret: str) -> str:
    """Return the hex-encoded HMAC-SHA256 of *raw_body* keyed by *secret*."""
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()


def normalize_signature(signature: str) -> str:
    """Strip the optional ``sha256=`` prefix from a header value."""
    signature = signature.strip()
    if signature.startswith(SIGNATURE_PREFIX):
        return signature[len(SIGNATURE_PREFIX):]
    return signature


def timing_safe_equal_hex(a: str, b: str) -> bool:
    """Compare two hex digests without leaking their contents through timing.

    Both strings are decoded to bytes first; undecodable input or a length
    mismatch is reported as unequal before any byte comparison happens.
    """
    try:
        a_bytes = bytes.fromhex(a)
        b_bytes = bytes.fromhex(b)
    except ValueError:
        return False
    if len(a_bytes) != len(b_bytes):
        return False
    return hmac.compare_digest(a_bytes, b_bytes)


def verify_signature(raw_body: bytes | None, signature: str | None, secret: str) -> None:
    """Verify *signature* against the exact bytes received.

    Raises:
        WebhookSignatureError: 400 when the header or body is missing,
            500 when the server secret is not configured,
            401 when the signature does not match.
    """
    if not signature:
        raise WebhookSignatureError("signature is required", 400)
    if not raw_body:
        raise WebhookSignatureError(
            "raw body is required for signature verification", 400
        )
    if not secret:
        raise WebhookSignatureError("webhook secret is not configured", 500)

    expected = compute_signature(raw_body, secret)
    if not timing_safe_equal_hex(normalize_signature(signature), expected):
        raise WebhookSignatureError("invalid signature", 401)
