"""
Gateway callback signature verification.

The gateway signs `order_id + "|" + payment_id` with HMAC-SHA256 keyed by the
merchant secret and hex-encodes the digest. A callback is authentic only if
recomputing that digest reproduces the supplied signature.
"""
import hashlib
import hmac

from kryos.errors import InputValidationError


def compute_signature(order_id: str, payment_id: str, secret: str) -> str:
    message = f"{order_id}|{payment_id}"
    return hmac.new(
        secret.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def verify_signature(order_id: str, payment_id: str, signature: str, secret: str) -> bool:
    """
    Returns True if `signature` matches the recomputed digest.

    Raises:
        InputValidationError: if any input is missing; nothing is computed.
    """
    if not order_id or not payment_id or not signature:
        raise InputValidationError("Missing required payment verification parameters")
    if not secret:
        raise InputValidationError("Gateway secret is not configured")

    expected = compute_signature(order_id, payment_id, secret)
    return hmac.compare_digest(expected, signature)
