"""Tests for the provider-agnostic algorithms."""

from __future__ import annotations

import os
from unittest.mock import patch

from conftest import hmac_b64, hmac_hex, now, rsa_sign_b64
from webhook_verify.algorithms import (
    build_signed_payload,
    sign_hmac,
    timing_safe_equal,
    validate_timestamp,
    verify_ed25519,
    verify_hmac,
    verify_hmac_with_timestamp,
    verify_rsa,
)


class TestVerifyHmac:
    """Tests for verify_hmac."""

    payload = b'{"event":"test"}'

    def test_default_sha256_hex(self) -> None:
        assert verify_hmac(self.payload, hmac_hex("sha256", "s", self.payload), "s") is True

    def test_sha512(self) -> None:
        signature = hmac_hex("sha512", "s", self.payload)
        assert verify_hmac(self.payload, signature, "s", algorithm="sha512") is True
        assert verify_hmac(self.payload, signature, "s") is False

    def test_base64_with_prefix(self) -> None:
        signature = "sha1=" + hmac_b64("sha1", "s", self.payload)
        assert verify_hmac(
            self.payload, signature, "s", algorithm="sha1", encoding="base64", prefix="sha1="
        ) is True

    def test_empty_inputs(self) -> None:
        signature = hmac_hex("sha256", "s", self.payload)
        assert verify_hmac(b"", signature, "s") is False
        assert verify_hmac(self.payload, "", "s") is False
        assert verify_hmac(self.payload, signature, "") is False

    def test_sign_round_trip(self) -> None:
        signature = sign_hmac(self.payload, "s", prefix="sha256=")
        assert signature.startswith("sha256=")
        assert verify_hmac(self.payload, signature, "s", prefix="sha256=") is True

    def test_sign_base64(self) -> None:
        assert sign_hmac("body", "s", algorithm="sha1", encoding="base64") == hmac_b64("sha1", "s", "body")


class TestBuildSignedPayload:
    """Tests for signed payload templates."""

    def test_default_format(self) -> None:
        assert build_signed_payload(b"body", 123) == b"123.body"

    def test_slack_format(self) -> None:
        assert build_signed_payload("body", "123", "v0:{timestamp}:{payload}") == b"v0:123:body"

    def test_payload_bytes_kept(self) -> None:
        raw = b"\xff\xfe{timestamp}"
        assert build_signed_payload(raw, 1) == b"1." + raw


class TestVerifyHmacWithTimestamp:
    """Tests for verify_hmac_with_timestamp."""

    payload = b'{"event":"test"}'

    def test_valid(self) -> None:
        ts = now()
        signature = hmac_hex("sha256", "s", f"{ts}.".encode() + self.payload)
        assert verify_hmac_with_timestamp(self.payload, signature, "s", ts) is True

    def test_custom_format(self) -> None:
        ts = now()
        signature = "v0=" + hmac_hex("sha256", "s", f"v0:{ts}:".encode() + self.payload)
        assert verify_hmac_with_timestamp(
            self.payload, signature, "s", str(ts), format="v0:{timestamp}:{payload}", prefix="v0="
        ) is True

    def test_stale(self) -> None:
        ts = now() - 600
        signature = hmac_hex("sha256", "s", f"{ts}.".encode() + self.payload)
        assert verify_hmac_with_timestamp(self.payload, signature, "s", ts) is False
        assert verify_hmac_with_timestamp(self.payload, signature, "s", ts, tolerance=700) is True

    def test_default_tolerance_from_environment(self) -> None:
        ts = now() - 600
        signature = hmac_hex("sha256", "s", f"{ts}.".encode() + self.payload)
        with patch.dict(os.environ, {"WEBHOOK_VERIFY_DEFAULT_TOLERANCE": "900"}):
            assert verify_hmac_with_timestamp(self.payload, signature, "s", ts) is True

    def test_invalid_timestamp(self) -> None:
        assert verify_hmac_with_timestamp(self.payload, "00", "s", "soon") is False
        assert verify_hmac_with_timestamp(self.payload, "00", "s", 0) is False


class TestAsymmetric:
    """Tests for verify_ed25519 and verify_rsa."""

    def test_ed25519(self, ed25519_keys) -> None:
        private_key, public_hex = ed25519_keys
        ts = str(now())
        signature = private_key.sign(ts.encode() + b"body").hex()
        assert verify_ed25519(ts.encode() + b"body", signature, public_hex) is True
        assert verify_ed25519(b"body", signature, public_hex) is False
        assert verify_ed25519(b"", signature, public_hex) is False

    def test_rsa(self, rsa_keys) -> None:
        private_key, public_pem = rsa_keys
        signature = rsa_sign_b64(private_key, b"body")
        assert verify_rsa(b"body", signature, public_pem) is True
        assert verify_rsa(b"other", signature, public_pem) is False
        assert verify_rsa(b"body", signature, "") is False


class TestHelpers:
    """Tests for timing_safe_equal and validate_timestamp."""

    def test_timing_safe_equal(self) -> None:
        assert timing_safe_equal("abc", "abc") is True
        assert timing_safe_equal("abc", "abcd") is False

    def test_validate_timestamp(self, frozen_time) -> None:
        assert validate_timestamp(frozen_time - 300) is True
        assert validate_timestamp(frozen_time - 301) is False
        assert validate_timestamp(str(frozen_time - 301), tolerance=400) is True
        assert validate_timestamp("garbage") is False
