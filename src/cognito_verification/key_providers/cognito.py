"""
Cognito JWKS key provider.

Resolves token signing keys from a Cognito user pool's published key set,
forcing one key-set refresh when a ``kid`` is unknown.
"""

from __future__ import annotations

from typing import Any

import structlog
from jwt import PyJWK

from ..errors import KeyNotFound
from ..key_resolver import KeyResolver
from ..key_set import cognito_jwks_url
from ..key_set_cache import KeySetCache
from ..refresh_gate import RefreshGate

logger = structlog.get_logger(__name__)


class CognitoKeyProvider:
    """
    Resolves signing keys for a Cognito user pool.

    Resolution Strategy
    -------------------
    For each requested `kid`:

    1) Current key set
        - `KeySetCache.get()` returns the cached key set, fetching it if the
          cache is empty or expired.
        - `KeyResolver.resolve(kid, key_set, alg)` picks and materializes the key.

    2) Forced refresh on a miss
        - Cognito rotates keys by publishing a new one; a token signed with it
          arrives before our cached copy knows about it.
        - On `KeyNotFound` the key set is refreshed exactly once and the
          lookup retried. If a RefreshGate is configured and denies, the
          miss is reported without refreshing.

    3) Failure
        - `KeyNotFound` if the kid is still absent.
        - `FetchError` / `MaterializationError` propagate unchanged.

    Parameters
    ----------
    cache : KeySetCache
        Holds the current key set.

    resolver : KeyResolver
        Selects and materializes keys. Defaults to a plain KeyResolver.

    gate : RefreshGate | None
        Optional limit on forced refreshes. None (default) means every miss
        may refresh once.

    Example
    -------
    provider = CognitoKeyProvider.for_user_pool("eu-west-1", "eu-west-1_AbCdEf")
    key = provider.get_key_for_token(kid)
    """

    def __init__(
        self,
        cache: KeySetCache,
        resolver: KeyResolver | None = None,
        gate: RefreshGate | None = None,
    ) -> None:
        self._cache = cache
        self._resolver = resolver or KeyResolver()
        self._gate = gate

    @classmethod
    def for_user_pool(
        cls,
        region: str,
        user_pool_id: str,
        *,
        resolver: KeyResolver | None = None,
        gate: RefreshGate | None = None,
        **cache_kwargs: Any,
    ) -> CognitoKeyProvider:
        """Build a provider with a KeySetCache pointed at the pool's JWKS URL.

        Extra keyword arguments (``store``, ``ttl_seconds``, ``timeout``,
        ``fetcher``) go to KeySetCache.
        """
        cache = KeySetCache(cognito_jwks_url(region, user_pool_id), **cache_kwargs)
        return cls(cache, resolver=resolver, gate=gate)

    @property
    def cache(self) -> KeySetCache:
        return self._cache

    def get_key_for_token(self, kid: str, alg: str | None = None) -> PyJWK:
        key_set = self._cache.get()
        try:
            return self._resolver.resolve(kid, key_set, alg)
        except KeyNotFound:
            if self._gate is not None and not self._gate.allow():
                raise

        logger.info("jwks.refresh_forced", kid=kid, known_kids=list(key_set.kids))
        refreshed = self._cache.refresh(seen=key_set)
        return self._resolver.resolve(kid, refreshed, alg)
