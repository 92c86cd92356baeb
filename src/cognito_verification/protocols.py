"""Protocol definitions for the Cognito verification package.

This module defines structural interfaces using Protocol (PEP 544) for:
- Token verification
- Key resolution
- Key set storage
- Token extraction

Any class that implements the required methods satisfies the protocol, which
keeps the collaborators easy to fake in tests.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from jwt import PyJWK

    from .claims import ClaimSet
    from .key_set import KeySet

# ============================================================================
# Type Aliases
# ============================================================================

type ViewFunc = Callable[..., Any]
"""Type alias for Flask view functions (callable that takes any args and returns any)."""


# ============================================================================
# Core Protocols
# ============================================================================


class KeyProvider(Protocol):
    """Protocol for resolving token signing keys.

    Implementers turn a ``kid`` from the token header into a materialized key.

    Common implementations:
    - CognitoKeyProvider (JWKS endpoint, cached, refresh on miss)
    - Static key loader in tests
    """

    def get_key_for_token(self, kid: str, alg: str | None = None) -> PyJWK:
        """Resolve a signing key by its ID.

        Args:
            kid: Key ID from the JWT header.
            alg: Algorithm from the JWT header, for keys that do not
                declare one.

        Returns:
            PyJWK object containing the public key.

        Raises:
            KeyNotFound: If kid cannot be resolved, even after a refresh.
            FetchError: If the key set cannot be fetched.
            MaterializationError: If the matching key data is unusable.
        """
        ...


class TokenVerifier(Protocol):
    """Protocol for signature and validity-window verification.

    Audience is deliberately not part of this contract; see ClaimPolicy.
    """

    def verify(self, token: str, *, key_provider: KeyProvider | None = None) -> ClaimSet:
        """Verify a JWT and return its claims.

        Raises:
            AuthError: One of the classified verification failures.
        """
        ...


class KeySetStore(Protocol):
    """Protocol for holding the current key set.

    ``save`` must replace the stored key set in a single step so that a
    concurrent ``load`` never returns keys from two different fetches.
    """

    def load(self) -> KeySet | None:
        """Return the stored key set, or None if nothing is stored."""
        ...

    def save(self, key_set: KeySet, ttl_seconds: int | None) -> None:
        """Replace the stored key set.

        Args:
            key_set: The newly fetched key set.
            ttl_seconds: How long the store may keep it. None means no limit.
        """
        ...

    def clear(self) -> None:
        """Remove the stored key set."""
        ...


class Extractor(Protocol):
    """Protocol for extracting the raw token from the current Flask request."""

    def extract(self) -> str:
        """Extract the raw JWT string from the Flask request.

        Raises:
            MissingToken: Token not found or improperly formatted.
        """
        ...
