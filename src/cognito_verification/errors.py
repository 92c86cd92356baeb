"""Authentication errors.

This module defines the exception hierarchy for token verification failures.
All errors inherit from AuthError to allow catch-all error handling.

Security Note:
    Every error exposes the same ``error_code`` and ``description`` so the
    boundary can answer "401 Unauthorized" without revealing which check
    failed. The exception message (``str(err)``) carries the diagnostic detail
    and belongs in server-side logs only.
"""

from __future__ import annotations

from typing import ClassVar


class AuthError(Exception):
    """Base exception for all authentication failures.

    Attributes:
        error_code: HTTP status the boundary should answer with.
        description: Client-facing text. Deliberately identical for every subclass.
    """

    error_code: ClassVar[int] = 401
    description: ClassVar[str] = "Unauthorized"

    @property
    def reason(self) -> str:
        """Short machine-readable name of the failed check, for logs and metrics."""
        return type(self).__name__


class MissingToken(AuthError):  # noqa: N818
    """Raised when no bearer token could be extracted from the request."""


# ============================================================================
# Key set / key resolution
# ============================================================================


class FetchError(AuthError):
    """Raised when the JWKS document cannot be fetched or parsed.

    The caller decides whether this is fatal or retryable; the key set cache
    already retries a failed fetch once before raising.
    """


class KeyNotFound(AuthError):  # noqa: N818
    """Raised when no key in the current key set matches the token's ``kid``.

    Key providers force one key-set refresh before letting this escape.
    """


class MaterializationError(AuthError):
    """Raised when a matching JWK cannot be turned into a usable public key."""


# ============================================================================
# Token structure / signature / validity window
# ============================================================================


class MalformedToken(AuthError):  # noqa: N818
    """Raised when the token is not three well-formed base64url JSON segments."""


class MissingKeyID(AuthError):  # noqa: N818
    """Raised when the token header carries no usable ``kid``."""


class SignatureInvalid(AuthError):  # noqa: N818
    """Raised when the signature does not verify or the algorithm is not allowed."""


class TokenExpired(AuthError):  # noqa: N818
    """Raised when ``exp`` is not strictly in the future."""


class TokenNotYetValid(AuthError):  # noqa: N818
    """Raised when ``nbf`` or ``iat`` lies in the future."""


class ClaimTypeError(AuthError):
    """Raised when a claim is missing or has an unexpected shape."""


# ============================================================================
# Claim policy
# ============================================================================


class AudienceMismatch(AuthError):  # noqa: N818
    """Raised when the token was not minted for the expected audience."""


class IssuerMismatch(AuthError):  # noqa: N818
    """Raised when ``iss`` is not the configured user pool."""


class TokenUseMismatch(AuthError):  # noqa: N818
    """Raised when Cognito's ``token_use`` is not the configured one (id/access)."""
