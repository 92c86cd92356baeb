"""JWT verification implementation using PyJWT.

This module provides the verifier that:
- Parses the token structure and reads the key ID (kid) from the header
- Enforces an explicit algorithm allowlist before touching any key
- Resolves the signing key via a KeyProvider
- Verifies the signature using PyJWT
- Checks the validity window (exp, nbf, iat) against its own clock
- Maps PyJWT exceptions to the package's error types

Audience, issuer and token_use are not checked here; ClaimPolicy does that,
so a correctly signed token for the wrong client fails with a distinct error.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final

import jwt

from .claims import ClaimSet
from .errors import (
    MalformedToken,
    MissingKeyID,
    SignatureInvalid,
    TokenExpired,
    TokenNotYetValid,
)

if TYPE_CHECKING:
    from jwt import PyJWK

    from .protocols import KeyProvider

# Signature only: the validity window is checked by JWTVerifier itself.
_SIGNATURE_ONLY: Final[dict[str, Any]] = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
}


@dataclass(frozen=True, slots=True)
class JWTVerifyOptions:
    """Configuration for token validation rules.

    Attributes:
        algorithms: Tuple of allowed signing algorithms. MUST be an explicit
            allowlist of asymmetric algorithms to prevent algorithm confusion
            attacks. Cognito signs with RS256. Default: ("RS256",)

        leeway: Clock skew tolerance in seconds for exp/nbf/iat validation.
            Default: 0 (no leeway).

    Security Invariants:
        - Never allow algorithm='none' or an HMAC algorithm: the public key
          would become the shared secret.
        - Keep leeway minimal (<30 seconds) to maintain tight expiration enforcement
    """

    algorithms: tuple[str, ...] = ("RS256",)
    leeway: float = 0

    def __post_init__(self) -> None:
        if not self.algorithms:
            raise ValueError("algorithms must not be empty")
        unsafe = [a for a in self.algorithms if a.lower() == "none" or a.upper().startswith("HS")]
        if unsafe:
            raise ValueError(f"Only asymmetric algorithms may be allowed, got {unsafe}")
        if self.leeway < 0:
            raise ValueError(f"leeway must not be negative, got {self.leeway}")


class JWTVerifier:
    """Verifies signature and validity window of Cognito-issued JWTs.

    Verification runs through these states, and any failure ends it with the
    matching AuthError:

        parsed -> algorithm allowed, not expired -> key resolved
        -> signature checked -> temporally valid -> verified

    Expiry is checked on the unverified payload before the key is resolved.
    An expired token is rejected the same way whatever its signature, and
    without a JWKS round trip. Nothing from the payload is returned before the
    signature has been verified.

    Thread Safety:
        This class is thread-safe assuming the KeyProvider is thread-safe.
        The JWTVerifyOptions are frozen and immutable.

    Example:
        ```python
        provider = CognitoKeyProvider.for_user_pool("eu-west-1", "eu-west-1_AbCdEf")
        verifier = JWTVerifier(provider)

        try:
            claims = verifier.verify(raw_token)
        except TokenExpired:
            ...
        except AuthError:
            ...
        ```

    Attributes:
        _keys: Default KeyProvider, used when verify() is not given one.
        _opt: Immutable verification options.
        _clock: Time source, epoch seconds.
    """

    def __init__(
        self,
        key_provider: KeyProvider | None = None,
        options: JWTVerifyOptions | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._keys = key_provider
        self._opt = options or JWTVerifyOptions()
        self._clock = clock

    @property
    def options(self) -> JWTVerifyOptions:
        return self._opt

    def verify(self, token: str, *, key_provider: KeyProvider | None = None) -> ClaimSet:
        """Verify a JWT and return its claims.

        Args:
            token: Raw JWT string, without any "Bearer " prefix.
            key_provider: Resolves the signing key. Overrides the provider
                given to the constructor.

        Returns:
            ClaimSet of the verified payload, unchanged.

        Raises:
            MalformedToken: Not three base64url segments of JSON objects.
            MissingKeyID: No usable ``kid`` in the header.
            SignatureInvalid: Algorithm not allowed or signature mismatch.
            TokenExpired: ``exp`` not strictly after now.
            TokenNotYetValid: ``nbf``/``iat`` after now.
            ClaimTypeError: ``exp``/``nbf``/``iat`` missing or not numbers.
            KeyNotFound, FetchError, MaterializationError: From the key provider.
            ValueError: No key provider was given at all.
        """
        provider = key_provider or self._keys
        if provider is None:
            raise ValueError("JWTVerifier.verify() needs a key_provider")

        now = self._clock()
        header, unverified = self._parse(token)

        kid = header.get("kid")
        if not isinstance(kid, str) or not kid:
            raise MissingKeyID("Token header missing required 'kid'")

        alg = header.get("alg")
        if alg not in self._opt.algorithms:
            raise SignatureInvalid(f"Algorithm {alg!r} is not allowed")

        self._check_expiry(unverified, now)

        key = provider.get_key_for_token(kid, alg)
        claims = self._verify_signature(token, key, alg)

        self._check_expiry(claims, now)
        self._check_not_before(claims, now)
        return claims

    @staticmethod
    def _parse(token: str) -> tuple[dict[str, Any], ClaimSet]:
        if not isinstance(token, str):
            raise MalformedToken("Token is not a string")

        segments = token.split(".")
        if len(segments) != 3 or not all(segments):
            raise MalformedToken(f"Token must have 3 non-empty segments, got {len(segments)}")

        try:
            header = jwt.get_unverified_header(token)
            payload = jwt.decode(token, options={"verify_signature": False})
        except jwt.DecodeError as e:
            raise MalformedToken(f"Token could not be decoded: {e}") from e
        except jwt.InvalidTokenError as e:
            # PyJWT rejects a non-string kid while reading the header.
            raise MissingKeyID(f"Token header has an unusable 'kid': {e}") from e

        return header, ClaimSet(payload)

    def _verify_signature(self, token: str, key: PyJWK, alg: str) -> ClaimSet:
        # A key that declares its own alg must agree with the header.
        if key.algorithm_name != alg:
            raise SignatureInvalid(
                f"Token algorithm {alg!r} does not match key algorithm {key.algorithm_name!r}"
            )

        try:
            payload = jwt.decode(token, key.key, algorithms=[alg], options=_SIGNATURE_ONLY)
        except jwt.InvalidSignatureError as e:
            raise SignatureInvalid("Signature verification failed") from e
        except jwt.DecodeError as e:
            raise MalformedToken(f"Token could not be decoded: {e}") from e
        except (jwt.PyJWTError, TypeError) as e:
            # InvalidAlgorithmError, InvalidKeyError, or a key of the wrong type
            raise SignatureInvalid(f"Signature could not be verified: {e}") from e

        return ClaimSet(payload)

    def _check_expiry(self, claims: ClaimSet, now: float) -> None:
        if claims.expiry <= now - self._opt.leeway:
            raise TokenExpired("Token has expired")

    def _check_not_before(self, claims: ClaimSet, now: float) -> None:
        nbf = claims.not_before
        if nbf is not None and nbf > now + self._opt.leeway:
            raise TokenNotYetValid("Token is not valid yet (nbf)")

        iat = claims.issued_at
        if iat is not None and iat > now + self._opt.leeway:
            raise TokenNotYetValid("Token was issued in the future (iat)")
