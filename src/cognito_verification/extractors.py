"""Token extraction from HTTP requests.

The verification core receives a bare token string; pulling it out of the
request is the boundary's job and lives here.
"""

from __future__ import annotations

from flask import request

from .errors import MissingToken


class BearerExtractor:
    """Strips the scheme prefix from ``Authorization: Bearer <token>``.

    The prefix (scheme plus one space) is compared case-insensitively and
    whatever follows it, trimmed, is the token.

    Example:
        ```python
        auth = AuthExtension(authenticator, extractor=BearerExtractor())

        # API Gateway style proxies that forward the token elsewhere
        BearerExtractor(header="X-Forwarded-Authorization")
        ```
    """

    def __init__(self, header: str = "Authorization", scheme: str = "Bearer") -> None:
        self._header = header
        self._prefix = f"{scheme} "

    def extract(self) -> str:
        """Return the raw JWT from the configured header.

        Raises:
            MissingToken: The header is absent, uses another scheme, or
                carries nothing after the prefix.
        """
        value = request.headers.get(self._header, "").strip()
        if not value:
            raise MissingToken(f"Missing {self._header} header")

        prefix_len = len(self._prefix)
        if value[:prefix_len].lower() != self._prefix.lower():
            raise MissingToken(f"{self._header} header does not start with {self._prefix!r}")

        token = value[prefix_len:].strip()
        if not token:
            raise MissingToken("Bearer token is empty")
        return token
