import pytest

import cognito_verification as m


def _key_set(fetched_at: float = 100.0) -> m.KeySet:
    doc = {"keys": [{"kid": "a", "kty": "RSA", "e": "AQAB", "n": "abc"}]}
    return m.KeySet.from_document(doc, source_url="https://x/jwks.json", fetched_at=fetched_at)


def test_inmemory_store_save_load_clear():
    store = m.InMemoryKeySetStore()
    assert store.load() is None

    ks = _key_set()
    store.save(ks, ttl_seconds=60)
    assert store.load() is ks

    store.clear()
    assert store.load() is None


def test_redis_store_roundtrip(fake_redis):
    store = m.RedisKeySetStore(fake_redis)

    store.save(_key_set(123.5), ttl_seconds=60)
    loaded = store.load()

    assert loaded is not None
    assert loaded.kids == ("a",)
    assert loaded.fetched_at == 123.5
    assert loaded.source_url == "https://x/jwks.json"
    assert loaded.keys[0].data["n"] == "abc"
    assert fake_redis.ttls["cognito:jwks"] == 60


def test_redis_store_without_ttl_uses_set(fake_redis):
    store = m.RedisKeySetStore(fake_redis, key="pool-a")
    store.save(_key_set(), ttl_seconds=None)

    assert "pool-a" not in fake_redis.ttls
    assert store.load() is not None


def test_redis_store_empty_and_clear(fake_redis):
    store = m.RedisKeySetStore(fake_redis)
    assert store.load() is None

    store.save(_key_set(), ttl_seconds=60)
    store.clear()
    assert store.load() is None


@pytest.mark.parametrize(
    "raw",
    ["not-json", '{"jwks": {"keys": []}}', '{"source_url": "u", "fetched_at": 1, "jwks": "x"}'],
)
def test_redis_store_corrupt_data_raises(fake_redis, raw):
    store = m.RedisKeySetStore(fake_redis)
    fake_redis.set("cognito:jwks", raw)

    with pytest.raises(m.FetchError):
        store.load()


def test_redis_store_write_failure_raises():
    class BrokenRedis:
        def setex(self, *args):
            raise ConnectionError("down")

    store = m.RedisKeySetStore(BrokenRedis())
    with pytest.raises(m.FetchError):
        store.save(_key_set(), ttl_seconds=60)


def test_redis_store_read_and_delete_failures_raise():
    class DownRedis:
        def get(self, key):
            raise ConnectionError("down")

        def delete(self, key):
            raise ConnectionError("down")

    store = m.RedisKeySetStore(DownRedis())
    with pytest.raises(m.FetchError):
        store.load()
    with pytest.raises(m.FetchError):
        store.clear()
