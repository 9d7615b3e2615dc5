"""Webhook Verify shared types.

Provider names and the per-call options record accepted by every verifier.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from webhook_verify.core.config import get_config


class Provider(str, Enum):
    """Supported webhook providers."""

    STRIPE = "stripe"
    GITHUB = "github"
    SHOPIFY = "shopify"
    SLACK = "slack"
    TWILIO = "twilio"
    DISCORD = "discord"
    LINEAR = "linear"
    VERCEL = "vercel"
    SVIX = "svix"
    CLERK = "clerk"
    SENDGRID = "sendgrid"
    PADDLE = "paddle"
    INTERCOM = "intercom"
    MAILCHIMP = "mailchimp"
    GITLAB = "gitlab"
    TYPEFORM = "typeform"
    CRYSTALLIZE = "crystallize"
    ZENDESK = "zendesk"
    SQUARE = "square"
    HUBSPOT = "hubspot"
    SEGMENT = "segment"

    @classmethod
    def parse(cls, name: str | Provider) -> Provider:
        """Resolve a provider name case-insensitively.

        Raises:
            ValueError: If the name is not a supported provider.
        """
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).lower())
        except ValueError:
            raise ValueError(f"Unknown webhook provider: {name}") from None


class VerifyOptions(BaseModel):
    """Per-call verification options.

    Unset ``tolerance`` and ``method`` fall back to the configured defaults.
    Keys may be given in snake_case or as ``additionalSecrets``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    tolerance: int = Field(
        default_factory=lambda: get_config().default_tolerance,
        ge=0,
        description="Replay window in seconds.",
    )
    url: str | None = Field(
        default=None,
        description="Full request URL, required by Twilio, Square, HubSpot and Crystallize.",
    )
    method: str = Field(
        default_factory=lambda: get_config().default_method,
        description="HTTP method used by HubSpot and Crystallize.",
    )
    additional_secrets: list[str] = Field(
        default_factory=list,
        alias="additionalSecrets",
        description="Alternate secrets tried in order after the primary one fails.",
    )

    @classmethod
    def coerce(cls, options: VerifyOptions | Mapping[str, Any] | None) -> VerifyOptions:
        """Build options from None, a mapping, or an existing instance."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        return cls.model_validate(dict(options))
