"""Claim-level policy evaluated after a token has been verified.

Kept apart from JWTVerifier so that a correctly signed token minted for a
different app client fails with AudienceMismatch rather than looking like a
forged one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .errors import AudienceMismatch, IssuerMismatch, TokenUseMismatch

if TYPE_CHECKING:
    from .claims import ClaimSet


@dataclass(frozen=True, slots=True)
class ClaimPolicy:
    """Expectations a verified ClaimSet must meet.

    Attributes:
        issuer: Expected ``iss``, typically ``cognito_issuer(region, pool)``.
            None skips the check.
        token_use: Expected Cognito ``token_use`` (``"id"`` or ``"access"``).
            None accepts both.

    Example:
        ```python
        policy = ClaimPolicy(issuer=cognito_issuer("eu-west-1", "eu-west-1_AbCdEf"))
        policy.check(claims, expected_audience="client-123")
        ```
    """

    issuer: str | None = None
    token_use: str | None = None

    def check(self, claims: ClaimSet, expected_audience: str) -> None:
        """Raise unless ``claims`` satisfy the policy for ``expected_audience``.

        Cognito ID tokens carry the app client id in ``aud``; access tokens
        carry it in ``client_id`` and have no ``aud``. The ``client_id`` claim
        is only consulted when ``aud`` is absent.

        Raises:
            AudienceMismatch: ``expected_audience`` is not among the audiences.
            IssuerMismatch: ``iss`` differs from the configured issuer.
            TokenUseMismatch: ``token_use`` differs from the configured one.
            ClaimTypeError: One of these claims has an unexpected shape.
        """
        audiences = claims.audiences
        if "aud" not in claims and claims.client_id is not None:
            audiences = frozenset({claims.client_id})

        if expected_audience not in audiences:
            raise AudienceMismatch(
                f"Audience {sorted(audiences)!r} does not include {expected_audience!r}"
            )

        if self.issuer is not None and claims.issuer != self.issuer:
            raise IssuerMismatch(f"Issuer {claims.issuer!r} is not {self.issuer!r}")

        if self.token_use is not None and claims.token_use != self.token_use:
            raise TokenUseMismatch(f"token_use {claims.token_use!r} is not {self.token_use!r}")
