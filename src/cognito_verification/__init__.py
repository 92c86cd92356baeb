"""
Cognito access-token verification and Flask authentication extension.

High-level flow (per request)
-----------------------------
1. `AuthExtension.require()` decorator runs.
2. `BearerExtractor` pulls the raw JWT from `Authorization: Bearer <token>`.
3. `CognitoAuthenticator.authenticate(token)`:
   - `JWTVerifier.verify(token)` parses the token, reads `kid`, enforces the
     algorithm allowlist, rejects expired tokens, asks the KeyProvider for the
     key and verifies the signature and validity window.
   - `CognitoKeyProvider` serves keys from `KeySetCache`, refreshing the key
     set once when the `kid` is unknown (key rotation).
   - `ClaimPolicy.check(claims, audience)` enforces audience, issuer and
     token_use.
4. On success: verified claims are stored in `flask.g.jwt`.
5. On failure: HTTP 401 "Unauthorized"; the specific reason is only logged.

Example usage
-------------

.. code-block:: python

    from cognito_verification import AuthExtension, CognitoAuthenticator, CognitoSettings

    settings = CognitoSettings.from_env()
    auth = AuthExtension(CognitoAuthenticator.from_settings(settings))
    auth.init_app(app)

    @app.post("/rounds")
    @auth.require()
    def save_round():
        return {"player": g.jwt["sub"]}
"""

# Authenticator
from .authenticator import CognitoAuthenticator

# Claims
from .claims import ClaimSet

# Configuration
from .config import CognitoSettings

# Errors
from .errors import (
    AudienceMismatch,
    AuthError,
    ClaimTypeError,
    FetchError,
    IssuerMismatch,
    KeyNotFound,
    MalformedToken,
    MaterializationError,
    MissingKeyID,
    MissingToken,
    SignatureInvalid,
    TokenExpired,
    TokenNotYetValid,
    TokenUseMismatch,
)

# Extractors
from .extractors import BearerExtractor

# Flask extension
from .flask_extension import AuthExtension

# Key providers
from .key_providers import CognitoKeyProvider

# Key resolution
from .key_resolver import KeyResolver

# Key sets
from .key_set import KeySet, SigningKey, cognito_issuer, cognito_jwks_url
from .key_set_cache import KeySetCache, pyjwt_fetcher
from .key_set_stores import InMemoryKeySetStore, RedisKeySetStore

# Logging
from .log_config import configure_logging

# Policy
from .policy import ClaimPolicy

# Protocols
from .protocols import Extractor, KeyProvider, KeySetStore, TokenVerifier, ViewFunc

# Refresh gate
from .refresh_gate import RefreshGate

# Verifier
from .verifier import JWTVerifier, JWTVerifyOptions

__all__ = [
    # Errors
    "AuthError",
    "AudienceMismatch",
    "ClaimTypeError",
    "FetchError",
    "IssuerMismatch",
    "KeyNotFound",
    "MalformedToken",
    "MaterializationError",
    "MissingKeyID",
    "MissingToken",
    "SignatureInvalid",
    "TokenExpired",
    "TokenNotYetValid",
    "TokenUseMismatch",
    # Protocols
    "Extractor",
    "KeyProvider",
    "KeySetStore",
    "TokenVerifier",
    "ViewFunc",
    # Key sets
    "KeySet",
    "SigningKey",
    "cognito_issuer",
    "cognito_jwks_url",
    "KeySetCache",
    "pyjwt_fetcher",
    "InMemoryKeySetStore",
    "RedisKeySetStore",
    # Key resolution
    "KeyResolver",
    "CognitoKeyProvider",
    "RefreshGate",
    # Verification
    "ClaimSet",
    "JWTVerifier",
    "JWTVerifyOptions",
    "ClaimPolicy",
    "CognitoAuthenticator",
    # Configuration / logging
    "CognitoSettings",
    "configure_logging",
    # Flask extension
    "AuthExtension",
    "BearerExtractor",
]
