"""Shared fixtures for webhook_verify tests."""

from __future__ import annotations

import base64
import hashlib
import hmac
import time

import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, padding, rsa

from webhook_verify.core.config import clear_config

FIXED_NOW = 1_700_000_000


@pytest.fixture(autouse=True)
def fresh_config():
    """Reload settings from the environment for every test."""
    clear_config()
    yield
    clear_config()


@pytest.fixture
def frozen_time(monkeypatch):
    """Pin time.time() to FIXED_NOW."""
    monkeypatch.setattr(time, "time", lambda: float(FIXED_NOW))
    return FIXED_NOW


def now() -> int:
    return int(time.time())


def hmac_hex(algorithm: str, key: str | bytes, message: str | bytes) -> str:
    key_bytes = key.encode() if isinstance(key, str) else key
    data = message.encode() if isinstance(message, str) else message
    return hmac.new(key_bytes, data, getattr(hashlib, algorithm)).hexdigest()


def hmac_b64(algorithm: str, key: str | bytes, message: str | bytes) -> str:
    key_bytes = key.encode() if isinstance(key, str) else key
    data = message.encode() if isinstance(message, str) else message
    return base64.b64encode(
        hmac.new(key_bytes, data, getattr(hashlib, algorithm)).digest()
    ).decode()


@pytest.fixture(scope="session")
def ed25519_keys():
    """Ed25519 private key and hex raw public key."""
    private_key = ed25519.Ed25519PrivateKey.generate()
    public_hex = private_key.public_key().public_bytes_raw().hex()
    return private_key, public_hex


@pytest.fixture(scope="session")
def rsa_keys():
    """RSA private key and PEM public key."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    public_pem = (
        private_key.public_key()
        .public_bytes(
            serialization.Encoding.PEM,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )
    return private_key, public_pem


@pytest.fixture(scope="session")
def ec_keys():
    """P-256 private key and base64 DER public key (SendGrid format)."""
    private_key = ec.generate_private_key(ec.SECP256R1())
    public_der = private_key.public_key().public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_key, base64.b64encode(public_der).decode()


def rsa_sign_b64(private_key, message: bytes, digest=None) -> str:
    signature = private_key.sign(message, padding.PKCS1v15(), digest or hashes.SHA256())
    return base64.b64encode(signature).decode()


def ecdsa_sign_b64(private_key, message: bytes) -> str:
    return base64.b64encode(private_key.sign(message, ec.ECDSA(hashes.SHA256()))).decode()
