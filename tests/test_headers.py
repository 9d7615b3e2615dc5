"""Tests for header extraction."""

from __future__ import annotations

import base64
import time

import pytest

from conftest import ecdsa_sign_b64, hmac_b64, hmac_hex, now
from webhook_verify import verify
from webhook_verify.webhooks.headers import (
    HEADER_NAMES,
    MissingSignatureHeaderError,
    SignatureData,
    get_header,
    get_header_names,
    get_signature,
)
from webhook_verify.webhooks.providers import get_provider
from webhook_verify.webhooks.types import Provider


class TestGetHeader:
    """Tests for case-insensitive header lookup."""

    def test_case_insensitive(self) -> None:
        headers = {"X-Hub-Signature-256": "sha256=abc"}
        assert get_header(headers, "x-hub-signature-256") == "sha256=abc"
        assert get_header(headers, "X-HUB-SIGNATURE-256") == "sha256=abc"

    def test_list_value_uses_first(self) -> None:
        assert get_header({"stripe-signature": ["first", "second"]}, "Stripe-Signature") == "first"

    def test_empty_values(self) -> None:
        assert get_header({"a": ""}, "a") is None
        assert get_header({"a": []}, "a") is None
        assert get_header({}, "a") is None

    def test_bytes_value(self) -> None:
        assert get_header({"a": b"value"}, "A") == "value"


class TestGetSignature:
    """Tests for building canonical tokens from headers."""

    def test_github(self) -> None:
        sig = get_signature(
            "github",
            {"X-Hub-Signature-256": "sha256=abc", "X-GitHub-Event": "push"},
        )
        assert sig == SignatureData(
            signature="sha256=abc", raw_signature="sha256=abc", event_type="push"
        )

    def test_shopify_topic(self) -> None:
        sig = get_signature(
            "shopify",
            {"X-Shopify-Hmac-Sha256": "abc=", "X-Shopify-Topic": "orders/create"},
        )
        assert sig.event_type == "orders/create"

    def test_slack_combines_timestamp(self) -> None:
        sig = get_signature(
            "slack",
            {"X-Slack-Signature": "v0=abc", "X-Slack-Request-Timestamp": "1700000000"},
        )
        assert sig.signature == "v0=abc,t=1700000000"
        assert sig.timestamp == "1700000000"

    def test_slack_requires_timestamp(self) -> None:
        assert get_signature("slack", {"X-Slack-Signature": "v0=abc"}) is None

    def test_svix(self) -> None:
        sig = get_signature(
            Provider.SVIX,
            {"svix-signature": "v1,abc", "svix-timestamp": "123", "svix-id": "msg_1"},
        )
        assert sig.signature == "v1,abc,t=123,id=msg_1"
        assert sig.message_id == "msg_1"

    def test_svix_missing_id(self) -> None:
        assert get_signature("clerk", {"svix-signature": "v1,abc", "svix-timestamp": "123"}) is None

    def test_sendgrid_timestamp_optional(self) -> None:
        headers = {"X-Twilio-Email-Event-Webhook-Signature": "c2ln"}
        assert get_signature("sendgrid", headers).signature == "c2ln"
        headers["X-Twilio-Email-Event-Webhook-Timestamp"] = "123"
        assert get_signature("sendgrid", headers).signature == "c2ln,t=123"

    def test_hubspot(self) -> None:
        sig = get_signature(
            "hubspot",
            {"X-HubSpot-Signature-v3": "abc", "X-HubSpot-Request-Timestamp": "1700000000000"},
        )
        assert sig.signature == "abc,t=1700000000000"

    def test_gitlab_token(self) -> None:
        sig = get_signature("gitlab", {"X-Gitlab-Token": "tok", "X-Gitlab-Event": "Push Hook"})
        assert sig.signature == "tok"
        assert sig.event_type == "Push Hook"

    @pytest.mark.parametrize("provider", list(Provider))
    def test_missing_headers(self, provider) -> None:
        assert get_signature(provider, {"content-type": "application/json"}) is None

    def test_unknown_provider(self) -> None:
        with pytest.raises(ValueError, match="Unknown webhook provider"):
            get_signature("bitbucket", {})


class TestHeadersEquivalence:
    """Verifying from headers matches verifying a hand-built token."""

    def test_stripe(self) -> None:
        payload = b'{"id":"evt_1"}'
        ts = now()
        token = f"t={ts},v1={hmac_hex('sha256', 'whsec_x', f'{ts}.'.encode() + payload)}"
        sig = get_signature("stripe", {"Stripe-Signature": [token]})
        assert get_provider("stripe").verify(payload, sig.signature, "whsec_x") is True

    def test_slack(self) -> None:
        payload = b"token=abc"
        ts = str(now())
        signature = "v0=" + hmac_hex("sha256", "secret", f"v0:{ts}:".encode() + payload)
        sig = get_signature(
            "slack",
            {"x-slack-signature": signature, "x-slack-request-timestamp": ts},
        )
        assert get_provider("slack").verify(payload, sig.signature, "secret") is True

    def test_discord(self, ed25519_keys) -> None:
        private_key, public_hex = ed25519_keys
        payload = b'{"type":1}'
        ts = str(now())
        signature = private_key.sign(ts.encode() + payload).hex()
        headers = {"X-Signature-Ed25519": signature, "X-Signature-Timestamp": ts}
        assert verify("discord", payload, headers, public_hex) is True
        assert verify("discord", payload, f"{signature},t={ts}", public_hex) is True

    @pytest.mark.parametrize("provider", ["svix", "clerk"])
    def test_svix_family(self, provider) -> None:
        key = b"svix-equivalence-key-0123456789ab"
        secret = "whsec_" + base64.b64encode(key).decode()
        payload = b'{"type":"user.created"}'
        ts = str(now())
        signature = hmac_b64("sha256", key, f"msg_1.{ts}.".encode() + payload)
        headers = {
            "Svix-Id": "msg_1",
            "Svix-Timestamp": ts,
            "Svix-Signature": f"v1,{signature}",
        }
        assert verify(provider, payload, headers, secret) is True
        assert verify(provider, payload, f"v1,{signature},t={ts},id=msg_1", secret) is True

    def test_sendgrid_with_timestamp(self, ec_keys) -> None:
        private_key, public_b64 = ec_keys
        payload = b'[{"event":"delivered"}]'
        ts = str(now())
        signature = ecdsa_sign_b64(private_key, ts.encode() + payload)
        headers = {
            "X-Twilio-Email-Event-Webhook-Signature": signature,
            "X-Twilio-Email-Event-Webhook-Timestamp": ts,
        }
        assert verify("sendgrid", payload, headers, public_b64) is True
        assert verify("sendgrid", payload, f"{signature},t={ts}", public_b64) is True

    def test_sendgrid_without_timestamp(self, ec_keys) -> None:
        private_key, public_b64 = ec_keys
        payload = b'[{"event":"open"}]'
        signature = ecdsa_sign_b64(private_key, payload)
        headers = {"X-Twilio-Email-Event-Webhook-Signature": signature}
        assert verify("sendgrid", payload, headers, public_b64) is True
        assert verify("sendgrid", payload, signature, public_b64) is True

    def test_hubspot(self) -> None:
        url = "https://example.com/hubspot"
        payload = b'[{"eventId":1}]'
        ts_ms = str(int(time.time() * 1000))
        signature = hmac_b64("sha256", "secret", f"POST{url}".encode() + payload + ts_ms.encode())
        headers = {"X-HubSpot-Signature-v3": signature, "X-HubSpot-Request-Timestamp": ts_ms}
        assert verify("hubspot", payload, headers, "secret", {"url": url}) is True
        assert verify("hubspot", payload, f"{signature},t={ts_ms}", "secret", {"url": url}) is True

    def test_zendesk(self) -> None:
        payload = b'{"ticket":1}'
        ts = str(now())
        signature = hmac_b64("sha256", "secret", ts.encode() + payload)
        headers = {
            "X-Zendesk-Webhook-Signature": signature,
            "X-Zendesk-Webhook-Signature-Timestamp": ts,
        }
        assert verify("zendesk", payload, headers, "secret") is True
        assert verify("zendesk", payload, f"{signature},t={ts}", "secret") is True

    def test_stale_headers_rejected(self) -> None:
        """Header-built tokens still go through the replay window."""
        payload = b'{"ticket":1}'
        ts = str(now() - 600)
        signature = hmac_b64("sha256", "secret", ts.encode() + payload)
        headers = {
            "X-Zendesk-Webhook-Signature": signature,
            "X-Zendesk-Webhook-Signature-Timestamp": ts,
        }
        assert verify("zendesk", payload, headers, "secret") is False


class TestHeaderNames:
    """Tests for get_header_names."""

    def test_every_provider_listed(self) -> None:
        assert set(HEADER_NAMES) == set(Provider)

    def test_slack(self) -> None:
        assert get_header_names("slack") == {
            "signature": "x-slack-signature",
            "timestamp": "x-slack-request-timestamp",
        }

    def test_returns_copy(self) -> None:
        names = get_header_names("stripe")
        names["signature"] = "changed"
        assert get_header_names("stripe")["signature"] == "stripe-signature"

    def test_names_are_lowercase(self) -> None:
        for names in HEADER_NAMES.values():
            for name in names.values():
                assert name == name.lower()


class TestMissingSignatureHeaderError:
    """Tests for the missing header error."""

    def test_message_lists_required_headers(self) -> None:
        error = MissingSignatureHeaderError(Provider.GITHUB, get_header_names("github"))
        assert isinstance(error, ValueError)
        assert error.provider is Provider.GITHUB
        assert "x-hub-signature-256" in str(error)
        assert "x-github-event" not in str(error)
