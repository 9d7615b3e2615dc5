"""Webhook Verify Cryptographic Primitives.

Low-level building blocks shared by every provider verifier: keyed hashing,
constant-time comparison, asymmetric signature checks and timestamp
freshness.

Features:
- HMAC-SHA1/SHA256/SHA512 with hex and base64 projections
- Constant-time comparison (length mismatch still does a dummy compare)
- Ed25519, RSA (PKCS#1 v1.5) and ECDSA P-256 verification
- Public keys as PEM, hex DER, base64 DER or raw hex Ed25519
- Replay-window timestamp validation

Every parse or verify failure is reported as ``False``; nothing in this
module raises on attacker-controlled input.

Usage:
    from webhook_verify.security.crypto import compute_hmac_hex, secure_compare

    expected = compute_hmac_hex("sha256", secret, payload)
    if secure_compare(expected, signature.lower()):
        process_webhook()
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import time
from enum import Enum
from typing import Literal

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes

HmacAlgorithm = Literal["sha1", "sha256", "sha512"]

DEFAULT_TOLERANCE_SECONDS = 300

# SPKI wrapper for a raw Ed25519 key (OID 1.3.101.112)
ED25519_SPKI_PREFIX = bytes.fromhex("302a300506032b6570032100")

_HMAC_DIGESTS = {
    "sha1": hashlib.sha1,
    "sha256": hashlib.sha256,
    "sha512": hashlib.sha512,
}

_CRYPTO_ERRORS = (
    InvalidSignature,
    UnsupportedAlgorithm,
    ValueError,
    TypeError,
    binascii.Error,
)


class SignatureScheme(Enum):
    """Asymmetric signature schemes understood by verify_asymmetric."""

    ED25519 = "ed25519"
    RSA_SHA256 = "RSA-SHA256"
    RSA_SHA1 = "RSA-SHA1"
    ECDSA_SHA256 = "ECDSA-SHA256"


def to_bytes(value: str | bytes) -> bytes:
    """Return ``value`` as bytes, encoding text as UTF-8."""
    if isinstance(value, bytes):
        return value
    return value.encode("utf-8")


def compute_hmac(
    algorithm: HmacAlgorithm,
    key: str | bytes,
    message: str | bytes,
) -> bytes:
    """Compute a raw HMAC digest.

    Args:
        algorithm: One of ``sha1``, ``sha256`` or ``sha512``.
        key: The shared secret.
        message: The exact bytes that were signed.

    Returns:
        The digest bytes.

    Raises:
        ValueError: If the algorithm is not supported.
    """
    digest = _HMAC_DIGESTS.get(algorithm)
    if digest is None:
        raise ValueError(f"Unsupported HMAC algorithm: {algorithm}")
    return hmac.new(to_bytes(key), to_bytes(message), digest).digest()


def compute_hmac_hex(
    algorithm: HmacAlgorithm,
    key: str | bytes,
    message: str | bytes,
) -> str:
    """Compute an HMAC and return it as lower-case hex."""
    return compute_hmac(algorithm, key, message).hex()


def compute_hmac_base64(
    algorithm: HmacAlgorithm,
    key: str | bytes,
    message: str | bytes,
) -> str:
    """Compute an HMAC and return it as standard base64."""
    return base64.b64encode(compute_hmac(algorithm, key, message)).decode("ascii")


def secure_compare(a: str | bytes, b: str | bytes) -> bool:
    """Compare two values in constant time.

    When the lengths differ the first value is still compared against itself
    so the mismatch path does comparable work before returning ``False``.

    Args:
        a: First value.
        b: Second value.

    Returns:
        True if the values are equal.
    """
    if not isinstance(a, (str, bytes)) or not isinstance(b, (str, bytes)):
        return False

    buf_a = to_bytes(a)
    buf_b = to_bytes(b)

    if len(buf_a) != len(buf_b):
        hmac.compare_digest(buf_a, buf_a)
        return False

    return hmac.compare_digest(buf_a, buf_b)


def decode_key_material(key: str | bytes) -> bytes:
    """Decode a hex or base64 encoded key into raw bytes.

    Hex is tried before base64.

    Raises:
        ValueError: If the value is neither hex nor base64.
    """
    if isinstance(key, bytes):
        return key

    text = "".join(key.split())
    try:
        return bytes.fromhex(text)
    except ValueError:
        pass
    return base64.b64decode(text, validate=True)


def load_public_key(public_key: str | bytes) -> PublicKeyTypes:
    """Load a public key from PEM, hex DER or base64 DER.

    Raises:
        ValueError: If the key cannot be parsed.
    """
    if isinstance(public_key, str) and "-----BEGIN" in public_key:
        return serialization.load_pem_public_key(public_key.encode("utf-8"))
    if isinstance(public_key, bytes) and public_key.lstrip().startswith(b"-----BEGIN"):
        return serialization.load_pem_public_key(public_key)
    return serialization.load_der_public_key(decode_key_material(public_key))


def load_ed25519_public_key(public_key: str | bytes) -> Ed25519PublicKey:
    """Load an Ed25519 key given as raw 32 bytes or as SPKI/DER.

    A 32-byte key is loaded raw first; if that fails structurally it is
    wrapped with the fixed SPKI prefix and loaded as DER.

    Raises:
        ValueError: If the key is not a usable Ed25519 public key.
    """
    if isinstance(public_key, str) and "-----BEGIN" in public_key:
        key = load_public_key(public_key)
    else:
        raw = decode_key_material(public_key)
        if len(raw) == 32:
            try:
                return Ed25519PublicKey.from_public_bytes(raw)
            except ValueError:
                key = serialization.load_der_public_key(ED25519_SPKI_PREFIX + raw)
        else:
            key = serialization.load_der_public_key(raw)

    if not isinstance(key, Ed25519PublicKey):
        raise ValueError("Not an Ed25519 public key")
    return key


def verify_asymmetric(
    scheme: SignatureScheme,
    public_key: str | bytes,
    signature: bytes,
    message: str | bytes,
) -> bool:
    """Verify an asymmetric signature.

    Args:
        scheme: The signature scheme.
        public_key: PEM, hex/base64 DER, or (Ed25519 only) raw hex key.
        signature: Raw signature bytes (DER for ECDSA).
        message: The exact bytes that were signed.

    Returns:
        True if the signature is valid. Any parse or verify error gives False.
    """
    data = to_bytes(message)
    try:
        if scheme is SignatureScheme.ED25519:
            load_ed25519_public_key(public_key).verify(signature, data)
            return True

        key = load_public_key(public_key)
        if scheme is SignatureScheme.ECDSA_SHA256:
            if not isinstance(key, ec.EllipticCurvePublicKey):
                return False
            key.verify(signature, data, ec.ECDSA(hashes.SHA256()))
            return True

        if not isinstance(key, rsa.RSAPublicKey):
            return False
        digest = hashes.SHA1() if scheme is SignatureScheme.RSA_SHA1 else hashes.SHA256()
        key.verify(signature, data, padding.PKCS1v15(), digest)
        return True
    except _CRYPTO_ERRORS:
        return False


def verify_ed25519(
    public_key: str | bytes,
    signature: str,
    message: str | bytes,
) -> bool:
    """Verify a hex-encoded Ed25519 signature (Discord style)."""
    try:
        signature_bytes = bytes.fromhex(signature)
    except (ValueError, TypeError):
        return False
    return verify_asymmetric(SignatureScheme.ED25519, public_key, signature_bytes, message)


def verify_rsa(
    public_key: str | bytes,
    signature: str,
    message: str | bytes,
    algorithm: Literal["RSA-SHA256", "RSA-SHA1"] = "RSA-SHA256",
    encoding: Literal["base64", "hex"] = "base64",
) -> bool:
    """Verify an RSA PKCS#1 v1.5 signature encoded as base64 or hex."""
    try:
        if encoding == "hex":
            signature_bytes = bytes.fromhex(signature)
        else:
            signature_bytes = base64.b64decode(signature, validate=True)
        scheme = SignatureScheme(algorithm)
    except _CRYPTO_ERRORS:
        return False
    if scheme not in (SignatureScheme.RSA_SHA256, SignatureScheme.RSA_SHA1):
        return False
    return verify_asymmetric(scheme, public_key, signature_bytes, message)


def parse_timestamp(timestamp: int | str | None) -> int | None:
    """Parse an integer Unix timestamp, returning None if unparsable.

    Strings must be plain ASCII digits; signs, underscores and non-ASCII
    digits are rejected.
    """
    if timestamp is None or isinstance(timestamp, bool):
        return None
    if isinstance(timestamp, int):
        return timestamp
    if not isinstance(timestamp, str):
        return None
    text = timestamp.strip()
    if not (text.isascii() and text.isdigit()):
        return None
    return int(text)


def is_timestamp_fresh(
    timestamp: int | str | None,
    tolerance: int = DEFAULT_TOLERANCE_SECONDS,
    *,
    now: int | None = None,
) -> bool:
    """Check that a Unix timestamp (seconds) is inside the replay window.

    Args:
        timestamp: Timestamp in seconds, as int or decimal string.
        tolerance: Allowed distance from now, inclusive.
        now: Current time override; the wall clock is read when omitted.

    Returns:
        True if ``abs(now - timestamp) <= tolerance``.
    """
    ts = parse_timestamp(timestamp)
    if ts is None or ts <= 0:
        return False

    current_time = int(time.time()) if now is None else now
    return abs(current_time - ts) <= tolerance
