"""Webhook Verify provider verification module.

Provides webhook signature verification for a fixed set of providers with
constant-time comparison to prevent timing attacks.

Supported Providers:
- HMAC over the body: GitHub, Shopify, Mailchimp, Typeform, Intercom,
  Linear, Segment, Vercel
- HMAC with timestamps: Stripe, Slack, Svix, Clerk, Zendesk, HubSpot
- HMAC over URL and body: Twilio, Square
- Asymmetric: Discord (Ed25519), SendGrid (ECDSA), Paddle (RSA)
- Token: GitLab
- JWT: Crystallize

Usage:
    from webhook_verify.webhooks import get_provider, get_signature

    sig = get_signature("stripe", request.headers)
    provider = get_provider("stripe")
    result = provider.check(request.body, sig.signature, secret)

    if result.valid:
        print("Webhook verified!")
    else:
        log.info("rejected", status=result.status.value)
"""

from webhook_verify.webhooks.headers import (
    HEADER_NAMES,
    MissingSignatureHeaderError,
    SignatureData,
    get_header,
    get_header_names,
    get_signature,
)
from webhook_verify.webhooks.providers import (
    WEBHOOK_PROVIDERS,
    ClerkWebhookProvider,
    CrystallizeWebhookProvider,
    DiscordWebhookProvider,
    GitHubWebhookProvider,
    GitLabWebhookProvider,
    HmacWebhookProvider,
    HubSpotWebhookProvider,
    IntercomWebhookProvider,
    LinearWebhookProvider,
    MailchimpWebhookProvider,
    PaddleWebhookProvider,
    SegmentWebhookProvider,
    SendGridWebhookProvider,
    ShopifyWebhookProvider,
    SlackWebhookProvider,
    SquareWebhookProvider,
    StripeWebhookProvider,
    SvixWebhookProvider,
    TwilioWebhookProvider,
    TypeformWebhookProvider,
    VercelWebhookProvider,
    WebhookProvider,
    ZendeskWebhookProvider,
    get_provider,
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

__all__ = [
    # Base classes
    "WebhookProvider",
    "HmacWebhookProvider",
    "VerificationResult",
    "VerificationStatus",
    "Provider",
    "VerifyOptions",
    # Providers
    "ClerkWebhookProvider",
    "CrystallizeWebhookProvider",
    "DiscordWebhookProvider",
    "GitHubWebhookProvider",
    "GitLabWebhookProvider",
    "HubSpotWebhookProvider",
    "IntercomWebhookProvider",
    "LinearWebhookProvider",
    "MailchimpWebhookProvider",
    "PaddleWebhookProvider",
    "SegmentWebhookProvider",
    "SendGridWebhookProvider",
    "ShopifyWebhookProvider",
    "SlackWebhookProvider",
    "SquareWebhookProvider",
    "StripeWebhookProvider",
    "SvixWebhookProvider",
    "TwilioWebhookProvider",
    "TypeformWebhookProvider",
    "VercelWebhookProvider",
    "ZendeskWebhookProvider",
    # Registry
    "WEBHOOK_PROVIDERS",
    "get_provider",
    # Headers
    "HEADER_NAMES",
    "MissingSignatureHeaderError",
    "SignatureData",
    "get_header",
    "get_header_names",
    "get_signature",
    # Utilities
    "parse_signature_header",
    "parse_stripe_signature",
    "parse_slack_signature",
    "parse_svix_signature",
    "parse_paddle_signature",
    "parse_timestamped_signature",
]
