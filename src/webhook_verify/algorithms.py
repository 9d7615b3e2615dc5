"""Webhook Verify generic algorithms.

Provider-agnostic verification helpers for services outside the built-in
provider set. These bypass the provider registry entirely.

Usage:
    from webhook_verify.algorithms import verify_hmac, verify_hmac_with_timestamp

    # SHA256 HMAC, hex encoded (most common)
    verify_hmac(body, signature, secret)

    # SHA1 with "sha1=" prefix, base64 encoded
    verify_hmac(body, signature, secret, algorithm="sha1", encoding="base64", prefix="sha1=")

    # Stripe-style signature over "timestamp.payload"
    verify_hmac_with_timestamp(body, signature, secret, timestamp)

    # Slack-style signature over "v0:timestamp:payload"
    verify_hmac_with_timestamp(
        body, signature, secret, timestamp, format="v0:{timestamp}:{payload}"
    )
"""

from __future__ import annotations

from typing import Literal

from webhook_verify.core.config import get_config
from webhook_verify.security import crypto
from webhook_verify.security.crypto import HmacAlgorithm

SignatureEncoding = Literal["hex", "base64"]


def _resolve_tolerance(tolerance: int | None) -> int:
    return get_config().default_tolerance if tolerance is None else tolerance


def verify_hmac(
    payload: str | bytes,
    signature: str,
    secret: str | bytes,
    *,
    algorithm: HmacAlgorithm = "sha256",
    encoding: SignatureEncoding = "hex",
    prefix: str | None = None,
) -> bool:
    """Verify an HMAC signature over the payload.

    Args:
        payload: The raw request body.
        signature: The signature to check.
        secret: The HMAC secret.
        algorithm: sha1, sha256 or sha512.
        encoding: hex (compared case-insensitively) or base64.
        prefix: Prefix to strip from the signature, e.g. "sha256=".

    Returns:
        True if the signature is valid.
    """
    if not payload or not signature or not secret:
        return False

    sig = signature
    if prefix and sig.startswith(prefix):
        sig = sig[len(prefix) :]

    if encoding == "base64":
        computed = crypto.compute_hmac_base64(algorithm, secret, payload)
        return crypto.secure_compare(computed, sig)

    computed = crypto.compute_hmac_hex(algorithm, secret, payload)
    return crypto.secure_compare(computed, sig.lower())


def sign_hmac(
    payload: str | bytes,
    secret: str | bytes,
    *,
    algorithm: HmacAlgorithm = "sha256",
    encoding: SignatureEncoding = "hex",
    prefix: str = "",
) -> str:
    """Generate an HMAC signature, optionally prefixed."""
    if encoding == "base64":
        sig = crypto.compute_hmac_base64(algorithm, secret, payload)
    else:
        sig = crypto.compute_hmac_hex(algorithm, secret, payload)
    return prefix + sig


def build_signed_payload(
    payload: str | bytes,
    timestamp: int | str,
    format: str = "{timestamp}.{payload}",
) -> bytes:
    """Fill a "{timestamp}"/"{payload}" template without re-encoding the payload."""
    template = format.replace("{timestamp}", str(timestamp), 1)
    head, sep, tail = template.partition("{payload}")
    if not sep:
        return template.encode("utf-8")
    return head.encode("utf-8") + crypto.to_bytes(payload) + tail.encode("utf-8")


def verify_hmac_with_timestamp(
    payload: str | bytes,
    signature: str,
    secret: str | bytes,
    timestamp: int | str,
    *,
    tolerance: int | None = None,
    format: str = "{timestamp}.{payload}",
    algorithm: HmacAlgorithm = "sha256",
    encoding: SignatureEncoding = "hex",
    prefix: str | None = None,
) -> bool:
    """Verify an HMAC over a timestamped payload, checking freshness first.

    Args:
        payload: The raw request body.
        signature: The signature to check.
        secret: The HMAC secret.
        timestamp: Unix timestamp in seconds.
        tolerance: Replay window in seconds (default from settings, 300).
        format: Template of the signed payload with {timestamp} and {payload}.
        algorithm: sha1, sha256 or sha512.
        encoding: hex or base64.
        prefix: Prefix to strip from the signature.

    Returns:
        True if the timestamp is fresh and the signature is valid.
    """
    if not payload or not signature or not secret or not timestamp:
        return False

    if not crypto.is_timestamp_fresh(timestamp, _resolve_tolerance(tolerance)):
        return False

    signed_payload = build_signed_payload(payload, timestamp, format)
    return verify_hmac(
        signed_payload,
        signature,
        secret,
        algorithm=algorithm,
        encoding=encoding,
        prefix=prefix,
    )


def verify_ed25519(
    payload: str | bytes,
    signature: str,
    public_key: str | bytes,
) -> bool:
    """Verify a hex Ed25519 signature with a hex (raw or SPKI) public key.

    Example:
        # Discord-style verification
        verify_ed25519(timestamp + body, signature, public_key)
    """
    if not payload or not signature or not public_key:
        return False
    return crypto.verify_ed25519(public_key, signature, payload)


def verify_rsa(
    payload: str | bytes,
    signature: str,
    public_key: str | bytes,
    *,
    algorithm: Literal["RSA-SHA256", "RSA-SHA1"] = "RSA-SHA256",
    encoding: SignatureEncoding = "base64",
) -> bool:
    """Verify an RSA PKCS#1 v1.5 signature with a PEM or DER public key."""
    if not payload or not signature or not public_key:
        return False
    return crypto.verify_rsa(public_key, signature, payload, algorithm, encoding)


def timing_safe_equal(a: str | bytes, b: str | bytes) -> bool:
    """Constant-time equality check."""
    return crypto.secure_compare(a, b)


def validate_timestamp(timestamp: int | str, tolerance: int | None = None) -> bool:
    """Check that a Unix timestamp (seconds) is within the tolerance window."""
    return crypto.is_timestamp_fresh(timestamp, _resolve_tolerance(tolerance))
