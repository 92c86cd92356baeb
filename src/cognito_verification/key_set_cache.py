"""Lazy, refreshable cache for the identity provider's key set.

The cache fetches the JWKS document on first use, when the stored key set is
older than the configured TTL, or when a caller forces a refresh (typically
after a ``kid`` miss caused by key rotation). There is no background refresh
thread; every refresh happens on the calling thread.

Concurrency:
    Readers never take the lock while the stored key set is fresh. Fetches
    are serialized by a lock and re-check the store after acquiring it, so a
    burst of misses costs one network round trip.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Final

import structlog
from jwt import PyJWKClient
from jwt.exceptions import PyJWKClientError

from .errors import FetchError
from .key_set import KeySet
from .key_set_stores import InMemoryKeySetStore

if TYPE_CHECKING:
    from .protocols import KeySetStore

logger = structlog.get_logger(__name__)

type Fetcher = Callable[[], Mapping[str, Any]]
"""Zero-argument callable returning the parsed JWKS JSON document."""

_DEFAULT_TTL: Final[int] = 3600
_DEFAULT_TIMEOUT: Final[float] = 5.0
_FETCH_ATTEMPTS: Final[int] = 2


def pyjwt_fetcher(jwks_url: str, timeout: float = _DEFAULT_TIMEOUT) -> Fetcher:
    """Build a fetcher on top of PyJWT's JWKS client.

    PyJWKClient's own caching is disabled; KeySetCache owns the caching policy.
    """
    client = PyJWKClient(
        jwks_url,
        cache_keys=False,
        cache_jwk_set=False,
        timeout=timeout,
    )
    return client.fetch_data


class KeySetCache:
    """Holds the current KeySet and decides when to (re)fetch it.

    Args:
        jwks_url: Where the key set is published.
        store: Where the current KeySet lives. Defaults to InMemoryKeySetStore.
        fetcher: Returns the parsed JWKS document. Defaults to ``pyjwt_fetcher``.
        ttl_seconds: Maximum age of a stored key set. None means it never
                    expires on its own (only forced refreshes replace it).
        clock: Time source, epoch seconds.

    Example:
        ```python
        cache = KeySetCache(cognito_jwks_url("eu-west-1", "eu-west-1_AbCdEf"))
        key_set = cache.get()        # network fetch
        key_set = cache.get()        # served from memory
        key_set = cache.refresh()    # forced fetch after a kid miss
        ```
    """

    def __init__(
        self,
        jwks_url: str,
        *,
        store: KeySetStore | None = None,
        fetcher: Fetcher | None = None,
        ttl_seconds: int | None = _DEFAULT_TTL,
        timeout: float = _DEFAULT_TIMEOUT,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if ttl_seconds is not None and ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive or None, got {ttl_seconds}")

        self._url = jwks_url
        self._store: KeySetStore = store or InMemoryKeySetStore()
        self._fetcher: Fetcher = fetcher or pyjwt_fetcher(jwks_url, timeout)
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def jwks_url(self) -> str:
        return self._url

    def get(self) -> KeySet:
        """Return the current key set, fetching it if absent or expired.

        Raises:
            FetchError: If the key set cannot be fetched (after one retry).
        """
        current = self._load()
        if current is not None and self._is_fresh(current):
            return current

        with self._lock:
            current = self._load()
            if current is not None and self._is_fresh(current):
                return current
            return self._fetch_and_store()

    def refresh(self, *, seen: KeySet | None = None) -> KeySet:
        """Fetch the key set unconditionally and make it current.

        Args:
            seen: The key set the caller was looking at when it decided to
                  refresh. If another caller already replaced it with a newer
                  one while we waited for the lock, that one is returned
                  without another fetch.

        Raises:
            FetchError: If the key set cannot be fetched (after one retry).
        """
        with self._lock:
            if seen is not None:
                current = self._load()
                if current is not None and current.fetched_at > seen.fetched_at:
                    return current
            return self._fetch_and_store()

    def invalidate(self) -> None:
        """Drop the stored key set; the next get() fetches.

        Raises:
            FetchError: If the store cannot be cleared.
        """
        with self._lock:
            self._store.clear()

    def _load(self) -> KeySet | None:
        # An unreadable store counts as empty; the next save overwrites it.
        try:
            return self._store.load()
        except FetchError as e:
            logger.warning("jwks.store_failed", op="load", url=self._url, error=str(e))
            return None

    def _is_fresh(self, key_set: KeySet) -> bool:
        if self._ttl is None:
            return True
        return self._clock() - key_set.fetched_at < self._ttl

    def _fetch_and_store(self) -> KeySet:
        last_error: FetchError | None = None
        for attempt in range(1, _FETCH_ATTEMPTS + 1):
            try:
                key_set = self._fetch()
            except FetchError as e:
                logger.warning(
                    "jwks.fetch_failed", url=self._url, attempt=attempt, error=str(e)
                )
                last_error = e
                continue

            try:
                self._store.save(key_set, self._ttl)
            except FetchError as e:
                logger.warning("jwks.store_failed", op="save", url=self._url, error=str(e))
            logger.info("jwks.fetch", url=self._url, kids=list(key_set.kids))
            return key_set

        assert last_error is not None
        raise last_error

    def _fetch(self) -> KeySet:
        try:
            document = self._fetcher()
        except FetchError:
            raise
        except (PyJWKClientError, OSError, ValueError) as e:
            # ValueError covers json.JSONDecodeError from a non-JSON body.
            raise FetchError(f"Failed to fetch JWKS from {self._url}: {e}") from e

        return KeySet.from_document(document, source_url=self._url, fetched_at=self._clock())
