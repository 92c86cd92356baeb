"""
Integration tests for the score API example.

Runs the real verification stack end to end; only the JWKS HTTP fetch is faked.
"""

import time

import pytest
from flask import Flask

import cognito_verification as m
from examples.score_api.backend import create_app

URL = "https://cognito-idp.eu-west-1.amazonaws.com/eu-west-1_TestPool/.well-known/jwks.json"
ROUND = {"playerName": "Ada", "round": "3", "points": 12}


@pytest.fixture
def fetcher(make_fetcher, make_jwks, k1):
    return make_fetcher(make_jwks(k1))


@pytest.fixture
def score_app(fetcher) -> Flask:
    """Score API wired with a real authenticator for client-123."""
    settings = m.CognitoSettings(user_pool_id="eu-west-1_TestPool", app_client_id="client-123")
    provider = m.CognitoKeyProvider(m.KeySetCache(settings.jwks_url, fetcher=fetcher))
    authenticator = m.CognitoAuthenticator(
        m.JWTVerifier(provider), m.ClaimPolicy(issuer=settings.issuer), settings.app_client_id
    )

    app = create_app(m.AuthExtension(authenticator))
    app.config["TESTING"] = True
    return app


class TestSaveRound:
    def test_valid_token_saves_round(self, score_app: Flask, k1, make_claims):
        client = score_app.test_client()
        token = k1.sign(make_claims())

        response = client.post("/rounds", json=ROUND, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 201
        assert response.get_json() == {"status": "Saved"}
        assert score_app.extensions["rounds"] == [{**ROUND, "savedBy": "user-1"}]

    def test_invalid_body_is_400_after_authentication(self, score_app: Flask, k1, make_claims):
        client = score_app.test_client()
        token = k1.sign(make_claims())

        response = client.post(
            "/rounds", json={**ROUND, "points": "many"}, headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 400
        assert score_app.extensions["rounds"] == []

    def test_key_set_fetched_once_across_requests(self, score_app: Flask, fetcher, k1, make_claims):
        client = score_app.test_client()
        headers = {"Authorization": f"Bearer {k1.sign(make_claims())}"}

        for _ in range(3):
            assert client.post("/rounds", json=ROUND, headers=headers).status_code == 201
        assert fetcher.calls == 1


class TestRejections:
    """Nothing is written and the client always sees the same 401 body."""

    @pytest.mark.parametrize(
        "claims",
        [
            {"aud": "client-999"},
            {"exp": int(time.time()) - 10},
            {"iss": "https://cognito-idp.eu-west-1.amazonaws.com/other"},
        ],
    )
    def test_rejected_tokens(self, score_app: Flask, k1, make_claims, claims):
        client = score_app.test_client()
        token = k1.sign(make_claims(**claims))

        response = client.post("/rounds", json=ROUND, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.get_json() == {"status": "denied", "message": "Unauthorized"}
        assert score_app.extensions["rounds"] == []

    def test_token_signed_by_unknown_key(self, score_app: Flask, fetcher, k2, make_claims):
        client = score_app.test_client()
        token = k2.sign(make_claims())

        response = client.post("/rounds", json=ROUND, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert fetcher.calls == 2  # initial fetch + one forced refresh

    def test_missing_header(self, score_app: Flask):
        response = score_app.test_client().post("/rounds", json=ROUND)
        assert response.status_code == 401
