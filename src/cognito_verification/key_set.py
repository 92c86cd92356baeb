"""Immutable model of a published JSON Web Key Set.

A KeySet is built once from the JWKS document and never mutated; refreshing
the cache produces a new KeySet that replaces the old one wholesale.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Final

from .errors import FetchError

_COGNITO_HOST: Final[str] = "https://cognito-idp.{region}.amazonaws.com/{user_pool_id}"
_WELL_KNOWN_JWKS: Final[str] = "/.well-known/jwks.json"


def cognito_issuer(region: str, user_pool_id: str) -> str:
    """Return the ``iss`` value Cognito puts in tokens for this user pool."""
    return _COGNITO_HOST.format(region=region, user_pool_id=user_pool_id)


def cognito_jwks_url(region: str, user_pool_id: str) -> str:
    """Return the user pool's published key set URL."""
    return cognito_issuer(region, user_pool_id) + _WELL_KNOWN_JWKS


@dataclass(frozen=True, slots=True)
class SigningKey:
    """One entry of a key set, still opaque (not yet a crypto key object).

    Attributes:
        kid: Key identifier referenced by token headers.
        kty: Key type ("RSA", "EC", ...).
        alg: Declared algorithm, if the provider published one.
        use: Declared public key use ("sig" for Cognito), if published.
        data: The raw JWK members, read-only.
    """

    kid: str
    kty: str
    alg: str | None = None
    use: str | None = None
    data: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_jwk(cls, jwk: Any) -> SigningKey:
        if not isinstance(jwk, Mapping):
            raise FetchError("JWKS entry is not a JSON object")

        kid = jwk.get("kid")
        kty = jwk.get("kty")
        if not isinstance(kid, str) or not kid:
            raise FetchError("JWKS entry is missing a string 'kid'")
        if not isinstance(kty, str) or not kty:
            raise FetchError(f"JWKS entry {kid!r} is missing a string 'kty'")

        alg = jwk.get("alg")
        use = jwk.get("use")
        return cls(
            kid=kid,
            kty=kty,
            alg=alg if isinstance(alg, str) else None,
            use=use if isinstance(use, str) else None,
            data=MappingProxyType(dict(jwk)),
        )


@dataclass(frozen=True, slots=True)
class KeySet:
    """Ordered signing keys plus where and when they were fetched."""

    keys: tuple[SigningKey, ...]
    source_url: str
    fetched_at: float

    @classmethod
    def from_document(cls, document: Any, *, source_url: str, fetched_at: float) -> KeySet:
        """Parse a JWKS document (``{"keys": [...]}``).

        Raises:
            FetchError: If the document does not have the JWKS shape.
        """
        if not isinstance(document, Mapping):
            raise FetchError("JWKS document is not a JSON object")

        raw_keys = document.get("keys")
        if not isinstance(raw_keys, list):
            raise FetchError("JWKS document has no 'keys' array")

        return cls(
            keys=tuple(SigningKey.from_jwk(k) for k in raw_keys),
            source_url=source_url,
            fetched_at=fetched_at,
        )

    def to_document(self) -> dict[str, Any]:
        return {"keys": [dict(k.data) for k in self.keys]}

    def find(self, kid: str) -> SigningKey | None:
        # Duplicate kids are a provider error; first one wins.
        return next((k for k in self.keys if k.kid == kid), None)

    @property
    def kids(self) -> tuple[str, ...]:
        return tuple(k.kid for k in self.keys)

    def __len__(self) -> int:
        return len(self.keys)
