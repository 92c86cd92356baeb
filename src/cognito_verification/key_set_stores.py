"""Storage backends for the current key set.

This module provides implementations of the KeySetStore protocol. A store
holds exactly one KeySet; saving replaces it wholesale so readers see either
the previous key set or the new one, never a mix of the two.

Implementations:
- InMemoryKeySetStore: one reference in process memory (warm containers)
- RedisKeySetStore: shared across processes via Redis (short-lived workers
  that would otherwise start every invocation with an empty cache)

Expiry is decided by the KeySetCache from ``KeySet.fetched_at``; the TTL passed
to ``save`` only lets a remote store drop stale data by itself.
"""

from __future__ import annotations

import json
from typing import Any, Final

from .errors import FetchError
from .key_set import KeySet

_DEFAULT_REDIS_KEY: Final[str] = "cognito:jwks"


class InMemoryKeySetStore:
    """In-process store holding a single KeySet reference.

    Assigning an attribute is atomic in CPython, so no lock is needed for
    readers; KeySetCache serializes writers.
    """

    def __init__(self) -> None:
        self._current: KeySet | None = None

    def load(self) -> KeySet | None:
        return self._current

    def save(self, key_set: KeySet, ttl_seconds: int | None) -> None:
        self._current = key_set

    def clear(self) -> None:
        self._current = None


class RedisKeySetStore:
    """Redis-backed store for the current key set.

    The JWKS document is stored as JSON together with its source URL and fetch
    time, under a single key, so a write is one atomic ``SET``.

    Storage Format:
        {"source_url": ..., "fetched_at": ..., "jwks": {"keys": [...]}}

    Example:
        ```python
        import redis

        client = redis.Redis(host="localhost", port=6379)
        store = RedisKeySetStore(client)
        cache = KeySetCache(jwks_url, store=store)
        ```

    Attributes:
        _client: Redis client instance (from redis package).
        _key: Redis key the document lives under.
    """

    def __init__(self, redis_client: Any, key: str = _DEFAULT_REDIS_KEY) -> None:
        """Initialize Redis store.

        Args:
            redis_client: Redis client instance. Must support get(), set(),
                         setex() and delete().
            key: Redis key to store the key set under. Use one per user pool.

        Note:
            The type is Any to avoid hard dependency on redis package types.
            Any Redis-compatible client (redis-py, fakeredis, ...) works.
        """
        self._client = redis_client
        self._key = key

    def load(self) -> KeySet | None:
        """Return the stored key set, or None when nothing is stored.

        Raises:
            FetchError: If Redis cannot be read or the stored data cannot
                be decoded.
        """
        try:
            data = self._client.get(self._key)
        except Exception as e:
            raise FetchError("Failed to read key set from Redis") from e
        if data is None:
            return None

        try:
            obj = json.loads(data)
            return KeySet.from_document(
                obj["jwks"],
                source_url=obj["source_url"],
                fetched_at=float(obj["fetched_at"]),
            )
        except (json.JSONDecodeError, TypeError, ValueError, KeyError) as e:
            raise FetchError("Failed to deserialize cached key set") from e

    def save(self, key_set: KeySet, ttl_seconds: int | None) -> None:
        payload = json.dumps(
            {
                "source_url": key_set.source_url,
                "fetched_at": key_set.fetched_at,
                "jwks": key_set.to_document(),
            }
        )
        try:
            if ttl_seconds:
                self._client.setex(self._key, ttl_seconds, payload)
            else:
                self._client.set(self._key, payload)
        except Exception as e:
            raise FetchError("Failed to store key set in Redis") from e

    def clear(self) -> None:
        try:
            self._client.delete(self._key)
        except Exception as e:
            raise FetchError("Failed to delete key set from Redis") from e
