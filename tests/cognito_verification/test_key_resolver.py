import pytest
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey

import cognito_verification as m


def _key_set(*jwks: dict) -> m.KeySet:
    return m.KeySet.from_document({"keys": list(jwks)}, source_url="u", fetched_at=0)


def test_resolve_materializes_rsa_public_key(k1, k2):
    resolver = m.KeyResolver()
    key = resolver.resolve("K2", _key_set(k1.jwk, k2.jwk))

    assert key.key_id == "K2"
    assert key.algorithm_name == "RS256"
    assert isinstance(key.key, RSAPublicKey)
    assert key.key.public_numbers() == k2.private_key.public_key().public_numbers()


def test_resolve_unknown_kid_raises_key_not_found(k1):
    with pytest.raises(m.KeyNotFound):
        m.KeyResolver().resolve("nope", _key_set(k1.jwk))


def test_resolve_uses_first_duplicate(k1, k2):
    impostor = {**k2.jwk, "kid": "K1"}
    key = m.KeyResolver().resolve("K1", _key_set(k1.jwk, impostor))

    assert key.key.public_numbers() == k1.private_key.public_key().public_numbers()


def test_encryption_keys_never_match(k1):
    enc = {**k1.jwk, "use": "enc"}
    with pytest.raises(m.KeyNotFound):
        m.KeyResolver().resolve("K1", _key_set(enc))


@pytest.mark.parametrize(
    "broken",
    [
        {"kid": "K1", "kty": "RSA", "alg": "RS256", "e": "AQAB"},  # no modulus
        {"kid": "K1", "kty": "RSA", "alg": "RS256", "n": "!!!", "e": "AQAB"},
        {"kid": "K1", "kty": "WAT", "alg": "RS256"},
        {"kid": "K1", "kty": "RSA", "alg": "XX999", "n": "AQAB", "e": "AQAB"},
    ],
)
def test_corrupt_key_raises_materialization_error(broken):
    with pytest.raises(m.MaterializationError):
        m.KeyResolver().resolve("K1", _key_set(broken))


def test_alg_less_key_takes_the_token_algorithm(k1):
    alg_less = {k: v for k, v in k1.jwk.items() if k != "alg"}

    assert m.KeyResolver().resolve("K1", _key_set(alg_less), "RS512").algorithm_name == "RS512"
    assert m.KeyResolver().resolve("K1", _key_set(alg_less)).algorithm_name == "RS256"


def test_declared_alg_wins_over_token_algorithm(k1):
    assert m.KeyResolver().resolve("K1", _key_set(k1.jwk), "RS384").algorithm_name == "RS256"


def test_token_algorithm_from_another_family_cannot_materialize(k1):
    alg_less = {k: v for k, v in k1.jwk.items() if k != "alg"}

    with pytest.raises(m.MaterializationError):
        m.KeyResolver().resolve("K1", _key_set(alg_less), "ES256")
