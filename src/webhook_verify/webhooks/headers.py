"""Webhook Verify header extraction.

Turns a request header map into the canonical signature token each provider
verifier expects, so that

    verify(provider, body, get_signature(provider, headers).signature, secret)

is equivalent to building the token by hand.

Header lookup is case-insensitive. List-valued headers (as produced by some
frameworks for repeated headers) yield their first value. Any mapping, or
any object with an ``items()`` method, is accepted.

Usage:
    from webhook_verify.webhooks.headers import get_signature

    sig = get_signature("slack", request.headers)
    if sig is None:
        return Response(status_code=400)
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from webhook_verify.webhooks.types import Provider

HeaderValue = str | Sequence[str] | None
Headers = Mapping[str, HeaderValue]

# Informational header fields; never required for verification
_OPTIONAL_FIELDS = frozenset({"event", "topic"})


class MissingSignatureHeaderError(ValueError):
    """Raised when a header map lacks the headers a provider signs with."""

    def __init__(self, provider: Provider, header_names: dict[str, str]) -> None:
        self.provider = provider
        self.header_names = header_names
        required = ", ".join(
            name for field, name in header_names.items() if field not in _OPTIONAL_FIELDS
        )
        super().__init__(
            f"Missing required webhook signature header(s) for {provider.value}: {required}"
        )


@dataclass(frozen=True)
class SignatureData:
    """Signature data extracted from request headers."""

    signature: str
    """Canonical signature token, ready for verify()."""

    raw_signature: str | None = None
    """Raw signature header value."""

    timestamp: str | None = None
    """Timestamp header value, if the provider sends one."""

    message_id: str | None = None
    """Message id (Svix-based providers)."""

    event_type: str | None = None
    """Event type or topic header, if available."""


def get_header(headers: Headers | Any, name: str) -> str | None:
    """Get a header value case-insensitively.

    Args:
        headers: Header mapping.
        name: Header name.

    Returns:
        The first value of the header, or None if absent or empty.
    """
    name_lower = name.lower()
    for key, value in headers.items():
        if key.lower() != name_lower:
            continue
        if isinstance(value, (list, tuple)):
            value = value[0] if value else None
        if isinstance(value, bytes):
            value = value.decode("latin-1")
        return value or None
    return None


# Logical field -> header name for each provider
HEADER_NAMES: dict[Provider, dict[str, str]] = {
    Provider.STRIPE: {"signature": "stripe-signature"},
    Provider.GITHUB: {"signature": "x-hub-signature-256", "event": "x-github-event"},
    Provider.SHOPIFY: {"signature": "x-shopify-hmac-sha256", "topic": "x-shopify-topic"},
    Provider.SLACK: {
        "signature": "x-slack-signature",
        "timestamp": "x-slack-request-timestamp",
    },
    Provider.TWILIO: {"signature": "x-twilio-signature"},
    Provider.DISCORD: {
        "signature": "x-signature-ed25519",
        "timestamp": "x-signature-timestamp",
    },
    Provider.LINEAR: {"signature": "linear-signature"},
    Provider.VERCEL: {"signature": "x-vercel-signature"},
    Provider.SVIX: {
        "signature": "svix-signature",
        "timestamp": "svix-timestamp",
        "id": "svix-id",
    },
    Provider.CLERK: {
        "signature": "svix-signature",
        "timestamp": "svix-timestamp",
        "id": "svix-id",
    },
    Provider.SENDGRID: {
        "signature": "x-twilio-email-event-webhook-signature",
        "timestamp": "x-twilio-email-event-webhook-timestamp",
    },
    Provider.PADDLE: {"signature": "paddle-signature"},
    Provider.INTERCOM: {"signature": "x-hub-signature"},
    Provider.MAILCHIMP: {"signature": "x-mailchimp-signature"},
    Provider.GITLAB: {"token": "x-gitlab-token", "event": "x-gitlab-event"},
    Provider.TYPEFORM: {"signature": "typeform-signature"},
    Provider.CRYSTALLIZE: {"signature": "x-crystallize-signature"},
    Provider.ZENDESK: {
        "signature": "x-zendesk-webhook-signature",
        "timestamp": "x-zendesk-webhook-signature-timestamp",
    },
    Provider.SQUARE: {"signature": "x-square-hmacsha256-signature"},
    Provider.HUBSPOT: {
        "signature": "x-hubspot-signature-v3",
        "timestamp": "x-hubspot-request-timestamp",
    },
    Provider.SEGMENT: {"signature": "x-signature"},
}


def _single(provider: Provider, event_field: str | None = None) -> Callable[[Headers], SignatureData | None]:
    """Extractor for providers that sign with one header."""
    names = HEADER_NAMES[provider]
    signature_name = names.get("signature") or names["token"]

    def extract(headers: Headers) -> SignatureData | None:
        signature = get_header(headers, signature_name)
        if not signature:
            return None
        event = get_header(headers, names[event_field]) if event_field else None
        return SignatureData(signature=signature, raw_signature=signature, event_type=event)

    return extract


def _with_timestamp(provider: Provider, timestamp_required: bool = True) -> Callable[[Headers], SignatureData | None]:
    """Extractor for providers that combine signature and timestamp as "<sig>,t=<ts>"."""
    names = HEADER_NAMES[provider]

    def extract(headers: Headers) -> SignatureData | None:
        signature = get_header(headers, names["signature"])
        timestamp = get_header(headers, names["timestamp"])
        if not signature or (timestamp_required and not timestamp):
            return None
        token = f"{signature},t={timestamp}" if timestamp else signature
        return SignatureData(signature=token, raw_signature=signature, timestamp=timestamp)

    return extract


def _svix(provider: Provider) -> Callable[[Headers], SignatureData | None]:
    names = HEADER_NAMES[provider]

    def extract(headers: Headers) -> SignatureData | None:
        signature = get_header(headers, names["signature"])
        timestamp = get_header(headers, names["timestamp"])
        message_id = get_header(headers, names["id"])
        if not signature or not timestamp or not message_id:
            return None
        return SignatureData(
            signature=f"{signature},t={timestamp},id={message_id}",
            raw_signature=signature,
            timestamp=timestamp,
            message_id=message_id,
        )

    return extract


_EXTRACTORS: dict[Provider, Callable[[Headers], SignatureData | None]] = {
    Provider.STRIPE: _single(Provider.STRIPE),
    Provider.GITHUB: _single(Provider.GITHUB, "event"),
    Provider.SHOPIFY: _single(Provider.SHOPIFY, "topic"),
    Provider.SLACK: _with_timestamp(Provider.SLACK),
    Provider.TWILIO: _single(Provider.TWILIO),
    Provider.DISCORD: _with_timestamp(Provider.DISCORD),
    Provider.LINEAR: _single(Provider.LINEAR),
    Provider.VERCEL: _single(Provider.VERCEL),
    Provider.SVIX: _svix(Provider.SVIX),
    Provider.CLERK: _svix(Provider.CLERK),
    Provider.SENDGRID: _with_timestamp(Provider.SENDGRID, timestamp_required=False),
    Provider.PADDLE: _single(Provider.PADDLE),
    Provider.INTERCOM: _single(Provider.INTERCOM),
    Provider.MAILCHIMP: _single(Provider.MAILCHIMP),
    Provider.GITLAB: _single(Provider.GITLAB, "event"),
    Provider.TYPEFORM: _single(Provider.TYPEFORM),
    Provider.CRYSTALLIZE: _single(Provider.CRYSTALLIZE),
    Provider.ZENDESK: _with_timestamp(Provider.ZENDESK),
    Provider.SQUARE: _single(Provider.SQUARE),
    Provider.HUBSPOT: _with_timestamp(Provider.HUBSPOT),
    Provider.SEGMENT: _single(Provider.SEGMENT),
}


def get_signature(provider: str | Provider, headers: Headers | Any) -> SignatureData | None:
    """Extract signature data from request headers for a provider.

    Args:
        provider: The webhook provider name.
        headers: Request headers.

    Returns:
        SignatureData, or None if required headers are missing.

    Raises:
        ValueError: If the provider is unknown.
    """
    return _EXTRACTORS[Provider.parse(provider)](headers)


def get_header_names(provider: str | Provider) -> dict[str, str]:
    """Get the header names a provider reads.

    Example:
        get_header_names("slack")
        # {"signature": "x-slack-signature", "timestamp": "x-slack-request-timestamp"}

    Raises:
        ValueError: If the provider is unknown.
    """
    return dict(HEADER_NAMES[Provider.parse(provider)])
