"""Verification plus claim policy behind one call.

CognitoAuthenticator is the object a request handler receives. It is built
once by whatever wires up the process (``from_settings``) and shared; it
holds no per-request state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from .errors import AuthError
from .key_providers import CognitoKeyProvider
from .policy import ClaimPolicy
from .verifier import JWTVerifier, JWTVerifyOptions

if TYPE_CHECKING:
    from .claims import ClaimSet
    from .config import CognitoSettings
    from .protocols import KeySetStore, TokenVerifier
    from .refresh_gate import RefreshGate

logger = structlog.get_logger(__name__)


class CognitoAuthenticator:
    """Verifies a token and checks it was minted for ``audience``.

    Every failure is logged with its specific reason and re-raised as the
    original AuthError subclass. Callers facing the network should only ever
    report ``err.description`` ("Unauthorized").

    Attributes:
        _verifier: Signature and validity-window verification.
        _policy: Audience/issuer/token_use expectations.
        _audience: App client id tokens must carry.
    """

    def __init__(self, verifier: TokenVerifier, policy: ClaimPolicy, audience: str) -> None:
        if not audience:
            raise ValueError("audience must not be empty")
        self._verifier = verifier
        self._policy = policy
        self._audience = audience

    @classmethod
    def from_settings(
        cls,
        settings: CognitoSettings,
        *,
        store: KeySetStore | None = None,
        gate: RefreshGate | None = None,
    ) -> CognitoAuthenticator:
        """Wire key provider, verifier and policy for one user pool."""
        provider = CognitoKeyProvider.for_user_pool(
            settings.region,
            settings.user_pool_id,
            gate=gate,
            store=store,
            ttl_seconds=settings.jwks_ttl_seconds,
        )
        verifier = JWTVerifier(provider, JWTVerifyOptions(leeway=settings.leeway))
        policy = ClaimPolicy(issuer=settings.issuer, token_use=settings.token_use)
        return cls(verifier, policy, settings.app_client_id)

    @property
    def audience(self) -> str:
        return self._audience

    def authenticate(self, token: str) -> ClaimSet:
        """Return the verified claims of ``token``.

        Raises:
            AuthError: Any verification or policy failure.
        """
        try:
            claims = self._verifier.verify(token)
            self._policy.check(claims, self._audience)
        except AuthError as e:
            logger.warning("token.rejected", reason=e.reason, detail=str(e))
            raise

        logger.debug("token.accepted", sub=claims.get("sub"))
        return claims
