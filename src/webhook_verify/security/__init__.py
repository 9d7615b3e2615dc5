"""Security primitives for webhook_verify.

This module provides:
- Keyed hashing (HMAC-SHA1/SHA256/SHA512)
- Constant-time comparison
- Ed25519, RSA and ECDSA signature verification
- Timestamp freshness checks
"""

from webhook_verify.security.crypto import (
    DEFAULT_TOLERANCE_SECONDS,
    ED25519_SPKI_PREFIX,
    SignatureScheme,
    compute_hmac,
    compute_hmac_base64,
    compute_hmac_hex,
    is_timestamp_fresh,
    load_ed25519_public_key,
    load_public_key,
    parse_timestamp,
    secure_compare,
    verify_asymmetric,
    verify_ed25519,
    verify_rsa,
)

__all__ = [
    "DEFAULT_TOLERANCE_SECONDS",
    "ED25519_SPKI_PREFIX",
    "SignatureScheme",
    "compute_hmac",
    "compute_hmac_base64",
    "compute_hmac_hex",
    "is_timestamp_fresh",
    "load_ed25519_public_key",
    "load_public_key",
    "parse_timestamp",
    "secure_compare",
    "verify_asymmetric",
    "verify_ed25519",
    "verify_rsa",
]
