"""Webhook Verify.

Verifies that an inbound webhook request was sent by the provider it claims
to come from, by checking the signature in its headers against a shared
secret or public key. Call it with the exact raw request body, before
parsing it.

Usage:
    from webhook_verify import verify

    # Pass headers directly (recommended)
    if not verify("stripe", request.body, request.headers, secret):
        return Response(status_code=401)

    # Or pass the signature token yourself
    verify("github", body, "sha256=...", secret)

    # Options: replay window, request URL, rotation secrets
    verify("stripe", body, request.headers, secret, {"tolerance": 600})
    verify("twilio", body, request.headers, auth_token, {"url": request.url})
    verify("github", body, headers, new_secret, {"additional_secrets": [old_secret]})

Only an unknown provider name, or a header map missing the provider's
signature headers, raises. Every other failure returns False; do not tell
the client why verification failed.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from webhook_verify.algorithms import (
    sign_hmac,
    timing_safe_equal,
    validate_timestamp,
    verify_ed25519,
    verify_hmac,
    verify_hmac_with_timestamp,
    verify_rsa,
)
from webhook_verify.core.config import VerifierSettings, clear_config, get_config
from webhook_verify.core.logging import configure_logging
from webhook_verify.webhooks.headers import (
    Headers,
    MissingSignatureHeaderError,
    SignatureData,
    get_header_names,
    get_signature,
)
from webhook_verify.webhooks.providers import WEBHOOK_PROVIDERS, Payload, get_provider
from webhook_verify.webhooks.types import Provider, VerifyOptions
from webhook_verify.webhooks.verifier import VerificationResult, VerificationStatus

__version__ = "0.1.0"


def _resolve_signature(provider: Provider, signature_or_headers: str | Headers | Any) -> str:
    if signature_or_headers is None:
        return ""
    if not hasattr(signature_or_headers, "items"):
        return signature_or_headers

    sig_data = get_signature(provider, signature_or_headers)
    if sig_data is None:
        raise MissingSignatureHeaderError(provider, get_header_names(provider))
    return sig_data.signature


def verify_detailed(
    provider: str | Provider,
    payload: Payload,
    signature_or_headers: str | Headers | Any,
    secret: str,
    options: VerifyOptions | Mapping[str, Any] | None = None,
) -> VerificationResult:
    """Verify a webhook and return the detailed result.

    The result's status and error are for server-side logs only.

    Raises:
        ValueError: If the provider is unknown.
        MissingSignatureHeaderError: If a header map lacks the signature headers.
    """
    verifier = get_provider(provider)
    signature = _resolve_signature(verifier.provider, signature_or_headers)
    return verifier.check(payload, signature, secret, options)


def verify(
    provider: str | Provider,
    payload: Payload,
    signature_or_headers: str | Headers | Any,
    secret: str,
    options: VerifyOptions | Mapping[str, Any] | None = None,
) -> bool:
    """Verify a webhook signature from a supported provider.

    Args:
        provider: The webhook provider name.
        payload: The raw request body.
        signature_or_headers: The signature token, or the request headers.
            None is treated as a missing signature.
        secret: The webhook secret, token, or public key.
        options: tolerance, url, method, additional_secrets.

    Returns:
        True if the signature is valid, False otherwise.

    Raises:
        ValueError: If the provider is unknown.
        MissingSignatureHeaderError: If a header map lacks the signature headers.
    """
    return verify_detailed(provider, payload, signature_or_headers, secret, options).valid


def get_supported_providers() -> list[str]:
    """Get the names of all supported providers."""
    return [provider.value for provider in WEBHOOK_PROVIDERS]


def is_provider_supported(provider: str) -> bool:
    """Check if a provider name is supported."""
    try:
        Provider.parse(provider)
    except ValueError:
        return False
    return True


__all__ = [
    # Entry points
    "verify",
    "verify_detailed",
    "get_supported_providers",
    "is_provider_supported",
    "get_provider",
    # Headers
    "get_signature",
    "get_header_names",
    "SignatureData",
    "MissingSignatureHeaderError",
    # Types
    "Provider",
    "VerifyOptions",
    "VerificationResult",
    "VerificationStatus",
    # Generic algorithms
    "verify_hmac",
    "sign_hmac",
    "verify_hmac_with_timestamp",
    "verify_ed25519",
    "verify_rsa",
    "timing_safe_equal",
    "validate_timestamp",
    # Configuration
    "VerifierSettings",
    "get_config",
    "clear_config",
    "configure_logging",
]
