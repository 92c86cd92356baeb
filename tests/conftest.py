import time
from dataclasses import dataclass
from typing import Any

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from flask import Flask
from jwt.algorithms import RSAAlgorithm

AUDIENCE = "client-123"
ISSUER = "https://cognito-idp.eu-west-1.amazonaws.com/eu-west-1_TestPool"
JWKS_URL = ISSUER + "/.well-known/jwks.json"


@dataclass(frozen=True)
class RSASigner:
    """A private key plus the public JWK a provider would publish for it."""

    kid: str
    private_key: rsa.RSAPrivateKey

    @property
    def jwk(self) -> dict[str, Any]:
        jwk = RSAAlgorithm.to_jwk(self.private_key.public_key(), as_dict=True)
        return {**jwk, "kid": self.kid, "alg": "RS256", "use": "sig"}

    def sign(self, claims: dict[str, Any], **headers: Any) -> str:
        return jwt.encode(claims, self.private_key, algorithm="RS256", headers={"kid": self.kid, **headers})


def _new_signer(kid: str) -> RSASigner:
    return RSASigner(kid=kid, private_key=rsa.generate_private_key(public_exponent=65537, key_size=2048))


@pytest.fixture(scope="session")
def k1() -> RSASigner:
    return _new_signer("K1")


@pytest.fixture(scope="session")
def k2() -> RSASigner:
    return _new_signer("K2")


@pytest.fixture
def make_claims():
    """
    Factory fixture for a valid Cognito-style claim set.

    Usage in tests:
        claims = make_claims(exp=time.time() - 10)
    """

    def _make(**overrides: Any) -> dict[str, Any]:
        now = int(time.time())
        claims = {
            "sub": "user-1",
            "aud": AUDIENCE,
            "iss": ISSUER,
            "token_use": "id",
            "iat": now - 5,
            "exp": now + 3600,
        }
        claims.update(overrides)
        return {k: v for k, v in claims.items() if v is not None}

    return _make


def jwks(*signers: RSASigner) -> dict[str, Any]:
    return {"keys": [s.jwk for s in signers]}


class FakeFetcher:
    """
    Stand-in for the JWKS HTTP fetch.

    Returns the queued documents in order (repeating the last one) and
    counts the calls. A queued exception is raised instead of returned.
    """

    def __init__(self, *responses: Any):
        self._responses = list(responses)
        self.calls = 0

    def __call__(self) -> Any:
        self.calls += 1
        response = self._responses[0] if len(self._responses) == 1 else self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeRedis:
    """
    Minimal redis stub for RedisKeySetStore tests.
    Stores bytes under keys and supports set/setex/delete.
    """

    def __init__(self):
        self._store: dict[str, tuple[bytes, float | None]] = {}
        self.ttls: dict[str, int] = {}

    def get(self, key: str):
        item = self._store.get(key)
        if item is None:
            return None
        data, expires_at = item
        if expires_at is not None and time.time() >= expires_at:
            self._store.pop(key, None)
            return None
        return data

    def set(self, key: str, value: str | bytes):
        if isinstance(value, str):
            value = value.encode("utf-8")
        self._store[key] = (value, None)

    def setex(self, key: str, ttl_seconds: int, value: str | bytes):
        if isinstance(value, str):
            value = value.encode("utf-8")
        self.ttls[key] = int(ttl_seconds)
        self._store[key] = (value, time.time() + int(ttl_seconds))

    def delete(self, key: str):
        self._store.pop(key, None)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture()
def app():
    app = Flask(__name__)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def make_jwks():
    return jwks


@pytest.fixture
def make_fetcher():
    """Factory fixture: make_fetcher(doc1, doc2, ...) -> FakeFetcher."""
    return FakeFetcher
