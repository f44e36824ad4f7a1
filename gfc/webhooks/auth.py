"""
Gitea webhook signature verification.
"""

import hashlib
import hmac

SIGNATURE_HEADER = "X-Gitea-Signature"


def compute_signature(secret: str, body: bytes) -> str:
    """Lowercase hex HMAC-SHA256 of body, the format Gitea sends."""
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def verify_signature(body: bytes, signature: str | None, secret: str | None) -> bool:
    """
    Check a webhook signature against the shared secret.

    Args:
        body: Raw request body
        signature: Value of the signature header
        secret: Configured webhook secret

    Returns:
        True only if both are present and the signature matches
    """
    if not signature or not secret:
        return False
    expected = compute_signature(secret, body)
    return hmac.compare_digest(expected.encode(), signature.encode("utf-8", errors="replace"))
