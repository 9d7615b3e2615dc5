"""Webhook Verify Providers.

Provider-specific webhook signature verification for a closed set of
services. Every provider implements the same contract:

    verify(payload, signature, secret, options=None) -> bool

where ``signature`` is the canonical signature token (see
``webhook_verify.webhooks.headers`` for building it from request headers)
and ``secret`` is the shared secret or public key.

Common rules:
- Empty payload, signature or secret fails (GitLab ignores the payload)
- All comparisons are constant-time; hex signatures are lower-cased first
- Malformed tokens, unparsable timestamps and missing options fail
- ``options.additional_secrets`` are tried in order after the primary secret

Usage:
    from webhook_verify.webhooks.providers import get_provider

    provider = get_provider("github")
    if provider.verify(request_body, signature_header, secret):
        # Process webhook
        pass
"""

from __future__ import annotations

import base64
import binascii
import json
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar, Literal
from urllib.parse import parse_qsl

import jwt
import structlog

from webhook_verify.security.crypto import (
    HmacAlgorithm,
    SignatureScheme,
    compute_hmac_base64,
    compute_hmac_hex,
    is_timestamp_fresh,
    parse_timestamp,
    secure_compare,
    verify_asymmetric,
    verify_ed25519,
    verify_rsa,
)
from webhook_verify.webhooks.types import Provider, VerifyOptions
from webhook_verify.webhooks.verifier import (
    VerificationResult,
    VerificationStatus,
    parse_paddle_signature,
    parse_signature_header,
    parse_slack_signature,
    parse_stripe_signature,
    parse_svix_signature,
    parse_timestamped_signature,
)

logger = structlog.get_logger()

Payload = str | bytes | bytearray | memoryview
Options = VerifyOptions | Mapping[str, Any] | None


class WebhookProvider(ABC):
    """Base class for webhook providers.

    Subclasses implement ``_verify_with_secret`` for a single secret; input
    validation, secret rotation and logging live here.
    """

    provider: ClassVar[Provider]

    requires_payload: ClassVar[bool] = True
    """Whether an empty payload fails verification."""

    @property
    def name(self) -> str:
        """Provider name."""
        return self.provider.value

    @abstractmethod
    def _verify_with_secret(
        self,
        payload: bytes,
        signature: str,
        secret: str,
        options: VerifyOptions,
        now: float,
    ) -> VerificationResult:
        """Verify against one secret.

        Args:
            payload: Raw request body.
            signature: Canonical signature token.
            secret: Shared secret or public key.
            options: Resolved options.
            now: Wall clock read once per call, in seconds.

        Returns:
            VerificationResult with status.
        """
        ...

    def check(
        self,
        payload: Payload,
        signature: str,
        secret: str,
        options: Options = None,
    ) -> VerificationResult:
        """Verify a webhook and return the detailed result.

        The primary secret is tried first, then each of
        ``options.additional_secrets`` in order; the first success wins. An
        empty primary secret fails without trying the alternates.

        Args:
            payload: Raw request body.
            signature: Canonical signature token.
            secret: Shared secret or public key.
            options: VerifyOptions or an equivalent mapping.

        Returns:
            VerificationResult with status.
        """
        opts = VerifyOptions.coerce(options)
        body = _as_bytes(payload)

        if not isinstance(signature, str) or not signature:
            result = self._invalid(
                VerificationStatus.MISSING_SIGNATURE, "No signature provided"
            )
        elif self.requires_payload and not body:
            result = self._invalid(VerificationStatus.INVALID_FORMAT, "Empty payload")
        elif not secret:
            result = self._invalid(VerificationStatus.INVALID_FORMAT, "No secret provided")
        else:
            now = time.time()
            secrets = [secret, *(s for s in opts.additional_secrets if s)]
            for candidate in secrets:
                result = self._verify_with_secret(body, signature, candidate, opts, now)
                if result.valid:
                    break

        if not result.valid:
            logger.debug(
                "Webhook verification failed",
                provider=self.name,
                status=result.status.value,
            )
        return result

    def verify(
        self,
        payload: Payload,
        signature: str,
        secret: str,
        options: Options = None,
    ) -> bool:
        """Verify a webhook signature.

        Returns:
            True if the signature is valid, False otherwise.
        """
        return self.check(payload, signature, secret, options).valid

    def _valid(self, timestamp: int | None = None) -> VerificationResult:
        return VerificationResult(
            valid=True,
            status=VerificationStatus.VALID,
            provider=self.name,
            timestamp=timestamp,
        )

    def _invalid(
        self,
        status: VerificationStatus,
        error: str,
        timestamp: int | None = None,
    ) -> VerificationResult:
        return VerificationResult(
            valid=False,
            status=status,
            error=error,
            provider=self.name,
            timestamp=timestamp,
        )

    def _match(
        self,
        matched: bool,
        timestamp: int | None = None,
    ) -> VerificationResult:
        if matched:
            return self._valid(timestamp)
        return self._invalid(
            VerificationStatus.INVALID_SIGNATURE, "Signature mismatch", timestamp
        )

    def _check_timestamp(
        self,
        timestamp: str,
        tolerance: int,
        now: float,
    ) -> VerificationResult | None:
        """Return a failure result if the timestamp is unusable or stale."""
        ts = parse_timestamp(timestamp)
        if ts is None or ts <= 0:
            return self._invalid(
                VerificationStatus.INVALID_TIMESTAMP, "Invalid timestamp format"
            )
        if not is_timestamp_fresh(ts, tolerance, now=int(now)):
            return self._invalid(
                VerificationStatus.EXPIRED_TIMESTAMP,
                "Timestamp outside tolerance window",
                ts,
            )
        return None

    def _require_url(self, options: VerifyOptions) -> VerificationResult | None:
        if not options.url:
            return self._invalid(
                VerificationStatus.MISSING_OPTION,
                f"{self.name} verification requires the url option",
            )
        return None


def _as_bytes(payload: Payload | None) -> bytes:
    if payload is None:
        return b""
    if isinstance(payload, str):
        return payload.encode("utf-8")
    return bytes(payload)


def _any_match(expected: str, candidates: list[str]) -> bool:
    """Compare every candidate so the work done does not depend on which matched."""
    matched = False
    for candidate in candidates:
        matched |= secure_compare(expected, candidate)
    return matched


class HmacWebhookProvider(WebhookProvider):
    """HMAC over the raw payload, with optional prefix on the signature."""

    algorithm: ClassVar[HmacAlgorithm] = "sha256"
    encoding: ClassVar[Literal["hex", "base64"]] = "hex"
    prefix: ClassVar[str] = ""

    def _verify_with_secret(
        self,
        payload: bytes,
        signature: str,
        secret: str,
        options: VerifyOptions,
        now: float,
    ) -> VerificationResult:
        sig = parse_signature_header(signature, prefix=self.prefix)
        if not sig:
            return self._invalid(
                VerificationStatus.INVALID_FORMAT, "Invalid signature format"
            )

        if self.encoding == "hex":
            expected = compute_hmac_hex(self.algorithm, secret, payload)
            sig = sig.lower()
        else:
            expected = compute_hmac_base64(self.algorithm, secret, payload)

        return self._match(secure_compare(expected, sig))


class GitHubWebhookProvider(HmacWebhookProvider):
    """GitHub webhook signature verification.

    GitHub sends: X-Hub-Signature-256: sha256=<hex>

    The prefix is optional.
    """

    provider = Provider.GITHUB
    prefix = "sha256="


class ShopifyWebhookProvider(HmacWebhookProvider):
    """Shopify: X-Shopify-Hmac-Sha256 with base64 HMAC-SHA256."""

    provider = Provider.SHOPIFY
    encoding = "base64"


class MailchimpWebhookProvider(HmacWebhookProvider):
    """Mailchimp: X-Mailchimp-Signature with base64 HMAC-SHA256."""

    provider = Provider.MAILCHIMP
    encoding = "base64"


class TypeformWebhookProvider(HmacWebhookProvider):
    """Typeform: Typeform-Signature: sha256=<base64>, prefix optional."""

    provider = Provider.TYPEFORM
    encoding = "base64"
    prefix = "sha256="


class IntercomWebhookProvider(HmacWebhookProvider):
    """Intercom: X-Hub-Signature: sha1=<hex>, prefix optional."""

    provider = Provider.INTERCOM
    algorithm = "sha1"
    prefix = "sha1="


class LinearWebhookProvider(HmacWebhookProvider):
    """Linear: Linear-Signature with hex HMAC-SHA256."""

    provider = Provider.LINEAR


class SegmentWebhookProvider(HmacWebhookProvider):
    """Segment: X-Signature with hex HMAC-SHA1."""

    provider = Provider.SEGMENT
    algorithm = "sha1"


class VercelWebhookProvider(HmacWebhookProvider):
    """Vercel: x-vercel-signature with hex HMAC-SHA1."""

    provider = Provider.VERCEL
    algorithm = "sha1"


class StripeWebhookProvider(WebhookProvider):
    """Stripe webhook signature verification.

    Stripe sends: Stripe-Signature: t=<timestamp>,v1=<signature>[,v0=<legacy>]

    The signed payload is "<timestamp>.<body>". Several ``v1`` entries may be
    present during secret rolls; any one matching is enough.
    """

    provider = Provider.STRIPE

    def _verify_with_secret(
        self,
        payload: bytes,
        signature: str,
        secret: str,
        options: VerifyOptions,
        now: float,
    ) -> VerificationResult:
        parsed = parse_stripe_signature(signature)
        if not parsed:
            return self._invalid(
                VerificationStatus.INVALID_FORMAT, "Invalid Stripe-Signature format"
            )

        timestamp = parsed["timestamp"]
        failure = self._check_timestamp(timestamp, options.tolerance, now)
        if failure is not None:
            return failure

        signed_payload = f"{timestamp}.".encode() + payload
        expected = compute_hmac_hex("sha256", secret, signed_payload)
        candidates = [sig.lower() for sig in parsed["signatures"]]

        return self._match(_any_match(expected, candidates), parse_timestamp(timestamp))


class SlackWebhookProvider(WebhookProvider):
    """Slack webhook signature verification.

    Slack sends:
    - X-Slack-Signature: v0=<signature>
    - X-Slack-Request-Timestamp: <timestamp>

    Signature is computed over: v0:{timestamp}:{body}

    A token without ``t=`` is checked against the current time, which means
    replay protection does not apply to that form.
    """

    provider = Provider.SLACK

    def _verify_with_secret(
        self,
        payload: bytes,
        signature: str,
        secret: str,
        options: VerifyOptions,
        now: float,
    ) -> VerificationResult:
        parsed = parse_slack_signature(signature)
        if not parsed:
            return self._invalid(
                VerificationStatus.INVALID_FORMAT, "Invalid Slack signature format"
            )

        timestamp = parsed["timestamp"]
        if timestamp is None:
            logger.debug("Slack signature has no timestamp, replay window not enforced")
            timestamp = str(int(now))

        failure = self._check_timestamp(timestamp, options.tolerance, now)
        if failure is not None:
            return failure

        sig_basestring = f"v0:{timestamp}:".encode() + payload
        expected = compute_hmac_hex("sha256", secret, sig_basestring)

        return self._match(
            secure_compare(f"v0={expected}", f"v0={parsed['signature'].lower()}"),
            parse_timestamp(timestamp),
        )


class SvixWebhookProvider(WebhookProvider):
    """Svix webhook signature verification.

    Svix sends:
    - svix-id: message id
    - svix-timestamp: <timestamp>
    - svix-signature: v1,<base64> [v1,<base64> ...]

    Signature is base64 HMAC-SHA256 over "{id}.{timestamp}.{body}" keyed with
    the base64-decoded secret (``whsec_`` prefix optional).
    """

    provider = Provider.SVIX

    def _verify_with_secret(
        self,
        payload: bytes,
        signature: str,
        secret: str,
        options: VerifyOptions,
        now: float,
    ) -> VerificationResult:
        parsed = parse_svix_signature(signature)
        if not parsed:
            return self._invalid(
                VerificationStatus.INVALID_FORMAT, "Invalid Svix signature format"
            )

        timestamp = parsed["timestamp"]
        failure = self._check_timestamp(timestamp, options.tolerance, now)
        if failure is not None:
            return failure

        encoded_secret = secret[6:] if secret.startswith("whsec_") else secret
        try:
            secret_key = base64.b64decode(encoded_secret, validate=True)
        except (binascii.Error, ValueError):
            return self._invalid(VerificationStatus.INVALID_FORMAT, "Invalid Svix secret")

        signed_payload = f"{parsed['message_id']}.{timestamp}.".encode() + payload
        expected = compute_hmac_base64("sha256", secret_key, signed_payload)

        return self._match(
            _any_match(expected, parsed["signatures"]), parse_timestamp(timestamp)
        )


class ClerkWebhookProvider(SvixWebhookProvider):
    """Clerk delivers webhooks through Svix; verification is identical."""

    provider = Provider.CLERK


class DiscordWebhookProvider(WebhookProvider):
    """Discord webhook signature verification.

    Discord sends:
    - X-Signature-Ed25519: <signature>
    - X-Signature-Timestamp: <timestamp>

    combined as "<signature>,t=<timestamp>". The secret is the application
    public key (hex). Uses Ed25519 over timestamp + body. The timestamp is
    signed but not checked against a replay window.
    """

    provider = Provider.DISCORD

    def _verify_with_secret(
        self,
        payload: bytes,
        signature: str,
        secret: str,
        options: VerifyOptions,
        now: float,
    ) -> VerificationResult:
        parsed = parse_timestamped_signature(signature)
        if not parsed:
            return self._invalid(
                VerificationStatus.INVALID_FORMAT, "Invalid Discord signature format"
            )

        timestamp = parsed["timestamp"]
        message = timestamp.encode() + payload

        return self._match(
            verify_ed25519(secret, parsed["signature"], message),
            parse_timestamp(timestamp),
        )


class TwilioWebhookProvider(WebhookProvider):
    """Twilio webhook signature verification.

    Twilio sends: X-Twilio-Signature: <base64>

    Signature is base64 HMAC-SHA1 over the full URL followed by every form
    parameter as key+value, sorted by key, with no separators. Requires the
    ``url`` option; the payload is the URL-encoded form body.
    """

    provider = Provider.TWILIO

    def _verify_with_secret(
        self,
        payload: bytes,
        signature: str,
        secret: str,
        options: VerifyOptions,
        now: float,
    ) -> VerificationResult:
        failure = self._require_url(options)
        if failure is not None:
            return failure

        params = parse_qsl(payload.decode("utf-8", errors="replace"), keep_blank_values=True)
        params.sort(key=lambda item: item[0])

        signature_base = options.url + "".join(key + value for key, value in params)
        expected = compute_hmac_base64("sha1", secret, signature_base)

        return self._match(secure_compare(expected, signature))


class SendGridWebhookProvider(WebhookProvider):
    """SendGrid Event Webhook signature verification.

    SendGrid sends:
    - X-Twilio-Email-Event-Webhook-Signature: base64 ECDSA signature
    - X-Twilio-Email-Event-Webhook-Timestamp: <timestamp>

    combined as "<signature>,t=<timestamp>" (timestamp optional). The secret
    is the P-256 verification key. Signed message is timestamp + body.
    """

    provider = Provider.SENDGRID

    def _verify_with_secret(
        self,
        payload: bytes,
        signature: str,
        secret: str,
        options: VerifyOptions,
        now: float,
    ) -> VerificationResult:
        parsed = parse_timestamped_signature(signature, require_timestamp=False)
        if not parsed:
            return self._invalid(
                VerificationStatus.INVALID_FORMAT, "Invalid SendGrid signature format"
            )

        timestamp = parsed["timestamp"]
        if timestamp:
            failure = self._check_timestamp(timestamp, options.tolerance, now)
            if failure is not None:
                return failure
            message = timestamp.encode() + payload
        else:
            message = payload

        try:
            signature_bytes = base64.b64decode(parsed["signature"], validate=True)
        except (binascii.Error, ValueError):
            return self._invalid(
                VerificationStatus.INVALID_FORMAT, "Signature is not base64"
            )

        return self._match(
            verify_asymmetric(SignatureScheme.ECDSA_SHA256, secret, signature_bytes, message),
            parse_timestamp(timestamp),
        )


class PaddleWebhookProvider(WebhookProvider):
    """Paddle webhook signature verification.

    Paddle sends: Paddle-Signature: ts=<timestamp>;h1=<signature>

    Signature is base64 RSA-SHA256 over "{timestamp}:{body}". The secret is
    the PEM public key.
    """

    provider = Provider.PADDLE

    def _verify_with_secret(
        self,
        payload: bytes,
        signature: str,
        secret: str,
        options: VerifyOptions,
        now: float,
    ) -> VerificationResult:
        parsed = parse_paddle_signature(signature)
        if not parsed:
            return self._invalid(
                VerificationStatus.INVALID_FORMAT, "Invalid Paddle-Signature format"
            )

        timestamp = parsed["timestamp"]
        failure = self._check_timestamp(timestamp, options.tolerance, now)
        if failure is not None:
            return failure

        signed_payload = f"{timestamp}:".encode() + payload

        return self._match(
            verify_rsa(secret, parsed["signature"], signed_payload, "RSA-SHA256"),
            parse_timestamp(timestamp),
        )


class GitLabWebhookProvider(WebhookProvider):
    """GitLab webhook verification.

    GitLab sends the configured secret token verbatim in X-Gitlab-Token; the
    payload is not signed.
    """

    provider = Provider.GITLAB
    requires_payload = False

    def _verify_with_secret(
        self,
        payload: bytes,
        signature: str,
        secret: str,
        options: VerifyOptions,
        now: float,
    ) -> VerificationResult:
        return self._match(secure_compare(signature, secret))


class ZendeskWebhookProvider(WebhookProvider):
    """Zendesk webhook signature verification.

    Zendesk sends:
    - X-Zendesk-Webhook-Signature: base64 HMAC-SHA256
    - X-Zendesk-Webhook-Signature-Timestamp: <timestamp>

    combined as "<signature>,t=<timestamp>". Signed message is timestamp + body.
    """

    provider = Provider.ZENDESK

    def _verify_with_secret(
        self,
        payload: bytes,
        signature: str,
        secret: str,
        options: VerifyOptions,
        now: float,
    ) -> VerificationResult:
        parsed = parse_timestamped_signature(signature)
        if not parsed:
            return self._invalid(
                VerificationStatus.INVALID_FORMAT, "Invalid Zendesk signature format"
            )

        timestamp = parsed["timestamp"]
        failure = self._check_timestamp(timestamp, options.tolerance, now)
        if failure is not None:
            return failure

        expected = compute_hmac_base64("sha256", secret, timestamp.encode() + payload)

        return self._match(
            secure_compare(expected, parsed["signature"]), parse_timestamp(timestamp)
        )


class SquareWebhookProvider(WebhookProvider):
    """Square webhook signature verification.

    Square sends: x-square-hmacsha256-signature: <base64>

    Signature is base64 HMAC-SHA256 over notification URL + body. Requires
    the ``url`` option.
    """

    provider = Provider.SQUARE

    def _verify_with_secret(
        self,
        payload: bytes,
        signature: str,
        secret: str,
        options: VerifyOptions,
        now: float,
    ) -> VerificationResult:
        failure = self._require_url(options)
        if failure is not None:
            return failure

        expected = compute_hmac_base64("sha256", secret, options.url.encode() + payload)

        return self._match(secure_compare(expected, signature))


class HubSpotWebhookProvider(WebhookProvider):
    """HubSpot v3 webhook signature verification.

    HubSpot sends:
    - X-HubSpot-Signature-v3: base64 HMAC-SHA256
    - X-HubSpot-Request-Timestamp: <timestamp in milliseconds>

    combined as "<signature>,t=<timestamp>". Signed message is
    method + url + body + timestamp. Requires the ``url`` option; ``method``
    defaults to POST. The tolerance is applied in milliseconds.
    """

    provider = Provider.HUBSPOT

    def _verify_with_secret(
        self,
        payload: bytes,
        signature: str,
        secret: str,
        options: VerifyOptions,
        now: float,
    ) -> VerificationResult:
        parsed = parse_timestamped_signature(signature)
        if not parsed:
            return self._invalid(
                VerificationStatus.INVALID_FORMAT, "Invalid HubSpot signature format"
            )

        failure = self._require_url(options)
        if failure is not None:
            return failure

        timestamp = parsed["timestamp"]
        timestamp_ms = parse_timestamp(timestamp)
        if timestamp_ms is None or timestamp_ms <= 0:
            return self._invalid(
                VerificationStatus.INVALID_TIMESTAMP, "Invalid timestamp format"
            )

        now_ms = int(now * 1000)
        if abs(now_ms - timestamp_ms) > options.tolerance * 1000:
            return self._invalid(
                VerificationStatus.EXPIRED_TIMESTAMP,
                "Timestamp outside tolerance window",
                timestamp_ms,
            )

        signed_payload = f"{options.method}{options.url}".encode() + payload + timestamp.encode()
        expected = compute_hmac_base64("sha256", secret, signed_payload)

        return self._match(secure_compare(expected, parsed["signature"]), timestamp_ms)


class CrystallizeWebhookProvider(WebhookProvider):
    """Crystallize webhook signature verification.

    Crystallize sends: X-Crystallize-Signature: <HS256 JWT>

    The JWT is signed with the secret and carries an ``exp`` claim and an
    ``hmac`` claim: hex HMAC-SHA256 of the compact JSON
    {"url": ..., "method": ..., "body": ...}. Requires the ``url`` option;
    ``method`` defaults to POST.
    Only ``exp`` is validated; ``aud``, ``iss``, ``iat`` and ``nbf`` are ignored.
    """

    provider = Provider.CRYSTALLIZE

    def _verify_with_secret(
        self,
        payload: bytes,
        signature: str,
        secret: str,
        options: VerifyOptions,
        now: float,
    ) -> VerificationResult:
        failure = self._require_url(options)
        if failure is not None:
            return failure

        try:
            claims = jwt.decode(
                signature,
                secret,
                algorithms=["HS256"],
                options={
                    "require": ["exp", "hmac"],
                    "verify_aud": False,
                    "verify_iss": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                },
            )
        except jwt.ExpiredSignatureError:
            return self._invalid(VerificationStatus.EXPIRED_TIMESTAMP, "JWT has expired")
        except jwt.PyJWTError:
            return self._invalid(VerificationStatus.INVALID_SIGNATURE, "Invalid JWT")

        expected_hmac = claims.get("hmac")
        if not isinstance(expected_hmac, str):
            return self._invalid(VerificationStatus.INVALID_FORMAT, "JWT hmac claim is not a string")

        data_to_hash = json.dumps(
            {
                "url": options.url,
                "method": options.method,
                "body": payload.decode("utf-8", errors="replace"),
            },
            separators=(",", ":"),
            ensure_ascii=False,
        )
        computed = compute_hmac_hex("sha256", secret, data_to_hash)

        return self._match(
            secure_compare(computed, expected_hmac.lower()), parse_timestamp(claims.get("exp"))
        )


# Provider registry
WEBHOOK_PROVIDERS: dict[Provider, WebhookProvider] = {
    provider.provider: provider
    for provider in (
        StripeWebhookProvider(),
        GitHubWebhookProvider(),
        ShopifyWebhookProvider(),
        SlackWebhookProvider(),
        TwilioWebhookProvider(),
        DiscordWebhookProvider(),
        LinearWebhookProvider(),
        VercelWebhookProvider(),
        SvixWebhookProvider(),
        ClerkWebhookProvider(),
        SendGridWebhookProvider(),
        PaddleWebhookProvider(),
        IntercomWebhookProvider(),
        MailchimpWebhookProvider(),
        GitLabWebhookProvider(),
        TypeformWebhookProvider(),
        CrystallizeWebhookProvider(),
        ZendeskWebhookProvider(),
        SquareWebhookProvider(),
        HubSpotWebhookProvider(),
        SegmentWebhookProvider(),
    )
}


def get_provider(provider_name: str | Provider) -> WebhookProvider:
    """Get a webhook provider by name.

    Args:
        provider_name: Name of the provider (case-insensitive).

    Returns:
        The registered WebhookProvider instance.

    Raises:
        ValueError: If provider is not found.
    """
    return WEBHOOK_PROVIDERS[Provider.parse(provider_name)]
