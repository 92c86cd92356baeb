import pytest
from flask import Flask

from cognito_verification import BearerExtractor, MissingToken


def test_bearer_extractor_missing(app: Flask):
    extractor = BearerExtractor()

    with app.test_request_context("/", headers={}):
        with pytest.raises(MissingToken, match="Missing Authorization header"):
            extractor.extract()


def test_bearer_extractor_ok(app: Flask):
    extractor = BearerExtractor()

    with app.test_request_context("/", headers={"Authorization": "Bearer abc.def.ghi"}):
        assert extractor.extract() == "abc.def.ghi"


def test_bearer_scheme_is_case_insensitive(app: Flask):
    with app.test_request_context("/", headers={"Authorization": "bearer abc.def.ghi"}):
        assert BearerExtractor().extract() == "abc.def.ghi"


@pytest.mark.parametrize("header", ["Bearer", "Basic dXNlcjpwYXNz", "Bearer    ", "abc.def.ghi", "Bearerabc.def.ghi"])
def test_bearer_extractor_rejects_bad_headers(app: Flask, header: str):
    with app.test_request_context("/", headers={"Authorization": header}):
        with pytest.raises(MissingToken):
            BearerExtractor().extract()


def test_custom_header_and_scheme(app: Flask):
    extractor = BearerExtractor(header="X-Forwarded-Authorization", scheme="JWT")

    with app.test_request_context("/", headers={"X-Forwarded-Authorization": "jwt  abc.def.ghi "}):
        assert extractor.extract() == "abc.def.ghi"

    with app.test_request_context("/", headers={"Authorization": "JWT abc.def.ghi"}):
        with pytest.raises(MissingToken, match="Missing X-Forwarded-Authorization header"):
            extractor.extract()
