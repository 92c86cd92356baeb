"""Flask extension guarding routes with Cognito token verification.

Security Model:
1. Extract the bearer token from the request
2. Verify signature, validity window and claim policy (CognitoAuthenticator)
3. Store the verified ClaimSet in flask.g.jwt for the view
4. Answer every failure with the same 401 "Unauthorized"; the specific
   reason is only logged
"""

from __future__ import annotations

from functools import wraps
from typing import TYPE_CHECKING, Any, Final

import structlog
from flask import Flask, abort, g

from .errors import AuthError, MissingToken
from .extractors import BearerExtractor

if TYPE_CHECKING:
    from .authenticator import CognitoAuthenticator
    from .protocols import Extractor, ViewFunc

logger = structlog.get_logger(__name__)

_EXT_KEY: Final[str] = "cognito_auth"
"""Flask extensions registry key for AuthExtension."""


class AuthExtension:
    """
    Flask decorator glue for Cognito authentication.

    Responsibilities:
    - Extract token from request
    - Authenticate it (CognitoAuthenticator)
    - Store verified claims in `flask.g.jwt`
    - Convert any failure to a generic HTTP 401 (abort)

    Usage:
        auth = AuthExtension(CognitoAuthenticator.from_settings(settings))
        auth.init_app(app)

        @app.post("/rounds")
        @auth.require()
        def save_round(): ...
    """

    def __init__(
        self,
        authenticator: CognitoAuthenticator | None = None,
        extractor: Extractor | None = None,
    ) -> None:
        self._authenticator = authenticator
        self._extractor: Extractor = extractor or BearerExtractor()

    def init_app(
        self,
        app: Flask,
        *,
        authenticator: CognitoAuthenticator | None = None,
        extractor: Extractor | None = None,
    ) -> None:
        """Register the extension on ``app``, optionally replacing collaborators."""
        if authenticator is not None:
            self._authenticator = authenticator
        if extractor is not None:
            self._extractor = extractor
        if self._authenticator is None:
            raise ValueError("AuthExtension needs an authenticator")

        app.extensions[_EXT_KEY] = self

    def require(self):
        """Decorator protecting a Flask view with token authentication.

        Error mapping:
        - Any ``AuthError``  -> HTTP 401 ("Unauthorized")
        - Any other Error    -> logged, then HTTP 401 ("Unauthorized")

        Side Effects:
                - Writes the verified ClaimSet to ``flask.g.jwt`` before calling the view.
                - May terminate request handling early via ``flask.abort``.
        """

        def decorator(view: ViewFunc) -> ViewFunc:
            @wraps(view)
            def wrapper(*args: Any, **kwargs: Any) -> Any:
                if self._authenticator is None:
                    raise RuntimeError("AuthExtension used before an authenticator was set")

                try:
                    token = self._extractor.extract()
                    g.jwt = self._authenticator.authenticate(token)
                except AuthError as e:
                    if isinstance(e, MissingToken):
                        logger.info("token.missing", detail=str(e))
                    abort(e.error_code, description=e.description)
                except Exception:
                    logger.exception("token.verification_crashed")
                    abort(AuthError.error_code, description=AuthError.description)

                return view(*args, **kwargs)

            return wrapper

        return decorator
