"""Webhook Verify result types and signature token grammars.

Provider verifiers consume a single canonical signature token. This module
holds the result types they return and the parsers that split a token into
its sub-fields (timestamp, message id, candidate signatures).

Token grammars:
- "sha256=abc123" or "abc123" (GitHub, Typeform, Intercom)
- "t=<ts>,v1=<sig>[,v1=<sig>][,v0=<legacy>]" (Stripe)
- "v0=<sig>,t=<ts>" or "v0=<sig>" (Slack)
- "v1,<sig> v1,<sig>,t=<ts>,id=<msg-id>" (Svix, Clerk)
- "ts=<ts>;h1=<sig>" (Paddle)
- "<sig>,t=<ts>" (Discord, SendGrid, HubSpot, Zendesk)

Parsers return None for malformed tokens and never raise.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class VerificationStatus(Enum):
    """Status of webhook signature verification."""

    VALID = "valid"
    INVALID_SIGNATURE = "invalid_signature"
    MISSING_SIGNATURE = "missing_signature"
    EXPIRED_TIMESTAMP = "expired_timestamp"
    INVALID_TIMESTAMP = "invalid_timestamp"
    INVALID_FORMAT = "invalid_format"
    MISSING_OPTION = "missing_option"


@dataclass
class VerificationResult:
    """Result of webhook signature verification."""

    valid: bool
    """Whether the signature is valid."""

    status: VerificationStatus
    """Detailed verification status."""

    error: str | None = None
    """Error message if verification failed."""

    provider: str | None = None
    """Webhook provider name if identified."""

    timestamp: int | None = None
    """Request timestamp if extracted."""

    def __bool__(self) -> bool:
        """Allow using result in boolean context."""
        return self.valid


def parse_signature_header(
    header_value: str,
    prefix: str = "",
) -> str | None:
    """Extract signature from header value.

    Handles common formats like:
    - "sha256=abc123" (GitHub)
    - "abc123" (plain)

    Args:
        header_value: The header value to parse.
        prefix: Optional prefix to strip (e.g., "sha256=").

    Returns:
        The extracted signature, or None if invalid.
    """
    if not header_value:
        return None

    if prefix and header_value.startswith(prefix):
        return header_value[len(prefix) :] or None

    return header_value


def parse_stripe_signature(header_value: str) -> dict[str, Any] | None:
    """Parse Stripe signature header format.

    Stripe format: "t=timestamp,v1=signature[,v1=signature][,v0=legacy]"

    Every ``v1`` entry is kept as a candidate; ``v0`` is ignored.

    Args:
        header_value: The Stripe-Signature header value.

    Returns:
        Dictionary with timestamp and signatures, or None if invalid.
    """
    if not header_value:
        return None

    timestamp = None
    signatures: list[str] = []
    for item in header_value.split(","):
        key, sep, value = item.strip().partition("=")
        if not sep:
            continue
        if key == "t":
            timestamp = value
        elif key == "v1" and value:
            signatures.append(value)

    if not timestamp or not signatures:
        return None

    return {
        "timestamp": timestamp,
        "signatures": signatures,
    }


def parse_slack_signature(header_value: str) -> dict[str, Any] | None:
    """Parse a Slack signature token.

    Slack sends:
    - X-Slack-Signature: v0=signature
    - X-Slack-Request-Timestamp: timestamp

    which are combined as "v0=<sig>,t=<ts>". A bare "v0=<sig>" or "<sig>"
    has no timestamp; the timestamp in the result is then None.

    Args:
        header_value: The combined Slack signature token.

    Returns:
        Dictionary with signature and timestamp, or None if invalid.
    """
    if not header_value:
        return None

    signature = None
    timestamp = None
    if "," in header_value:
        for item in header_value.split(","):
            key, _, value = item.strip().partition("=")
            if key == "v0":
                signature = value
            elif key == "t":
                timestamp = value
        if not timestamp:
            return None
    elif header_value.startswith("v0="):
        signature = header_value[3:]
    else:
        signature = header_value

    if not signature:
        return None

    return {
        "signature": signature,
        "timestamp": timestamp,
    }


def parse_svix_signature(header_value: str) -> dict[str, Any] | None:
    """Parse a Svix signature token.

    Svix sends:
    - svix-id: message id
    - svix-timestamp: timestamp
    - svix-signature: space separated "v1,<base64>" entries

    which are combined as "<svix-signature>,t=<ts>,id=<msg-id>".

    Args:
        header_value: The combined Svix signature token.

    Returns:
        Dictionary with signatures, timestamp and message_id, or None if invalid.
    """
    if not header_value:
        return None

    parts = [part for chunk in header_value.split(",") for part in chunk.split()]

    signatures: list[str] = []
    timestamp = None
    message_id = None
    index = 0
    while index < len(parts):
        part = parts[index]
        if part == "v1" and index + 1 < len(parts):
            signatures.append(parts[index + 1])
            index += 2
            continue
        if part.startswith("t="):
            timestamp = part[2:]
        elif part.startswith("id="):
            message_id = part[3:]
        index += 1

    if not timestamp or not message_id or not signatures:
        return None

    return {
        "signatures": signatures,
        "timestamp": timestamp,
        "message_id": message_id,
    }


def parse_paddle_signature(header_value: str) -> dict[str, Any] | None:
    """Parse Paddle signature header format.

    Paddle format: "ts=timestamp;h1=signature"

    Args:
        header_value: The Paddle-Signature header value.

    Returns:
        Dictionary with timestamp and signature, or None if invalid.
    """
    if not header_value:
        return None

    timestamp = None
    signature = None
    for item in header_value.split(";"):
        item = item.strip()
        if item.startswith("ts="):
            timestamp = item[3:]
        elif item.startswith("h1="):
            signature = item[3:]

    if not timestamp or not signature:
        return None

    return {
        "timestamp": timestamp,
        "signature": signature,
    }


def parse_timestamped_signature(
    header_value: str,
    require_timestamp: bool = True,
) -> dict[str, Any] | None:
    """Parse the "<sig>,t=<timestamp>" token shared by several providers.

    Args:
        header_value: The combined signature token.
        require_timestamp: Reject tokens without a ``t=`` field.

    Returns:
        Dictionary with signature and timestamp, or None if invalid.
    """
    if not header_value:
        return None

    signatures: list[str] = []
    timestamp = None
    for item in header_value.split(","):
        item = item.strip()
        if item.startswith("t="):
            timestamp = item[2:]
        elif item:
            signatures.append(item)

    if len(signatures) != 1:
        return None
    if require_timestamp and not timestamp:
        return None

    return {
        "signature": signatures[0],
        "timestamp": timestamp or None,
    }
