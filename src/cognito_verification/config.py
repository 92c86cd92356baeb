"""Settings for verifying tokens from one Cognito user pool.

Values come from the process environment (optionally a ``.env`` file loaded
with python-dotenv). The package never reads the environment on its own;
the code wiring up the process calls ``CognitoSettings.from_env()`` once.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

from dotenv import load_dotenv

from .key_set import cognito_issuer, cognito_jwks_url

_DEFAULT_REGION: Final[str] = "eu-west-1"
_DEFAULT_JWKS_TTL: Final[int] = 3600


def _required(env: Mapping[str, str], name: str) -> str:
    value = env.get(name, "").strip()
    if not value:
        raise ValueError(f"Environment variable {name} is required")
    return value


@dataclass(frozen=True, slots=True)
class CognitoSettings:
    """Which user pool to trust and which app client tokens must be for.

    Attributes:
        user_pool_id: e.g. ``"eu-west-1_AbCdEf123"``.
        app_client_id: Expected audience of incoming tokens.
        region: AWS region of the user pool.
        jwks_ttl_seconds: Maximum age of the cached key set.
        token_use: Accept only ``"id"`` or only ``"access"`` tokens. None accepts both.
        leeway: Clock skew tolerance in seconds.
    """

    user_pool_id: str
    app_client_id: str
    region: str = _DEFAULT_REGION
    jwks_ttl_seconds: int = _DEFAULT_JWKS_TTL
    token_use: str | None = None
    leeway: float = 0

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> CognitoSettings:
        """Read settings from the environment.

        Variables:
            COGNITO_USER_POOL_ID (required), COGNITO_APP_CLIENT_ID (required),
            COGNITO_REGION, COGNITO_JWKS_TTL, COGNITO_TOKEN_USE, COGNITO_LEEWAY.

        Args:
            env: Mapping to read instead of ``os.environ``. When omitted,
                a ``.env`` file is loaded first if present.

        Raises:
            ValueError: A required variable is missing or a number is invalid.
        """
        if env is None:
            load_dotenv()
            env = os.environ

        token_use = env.get("COGNITO_TOKEN_USE", "").strip() or None
        if token_use not in (None, "id", "access"):
            raise ValueError(f"COGNITO_TOKEN_USE must be 'id' or 'access', got {token_use!r}")

        return cls(
            user_pool_id=_required(env, "COGNITO_USER_POOL_ID"),
            app_client_id=_required(env, "COGNITO_APP_CLIENT_ID"),
            region=env.get("COGNITO_REGION", "").strip() or _DEFAULT_REGION,
            jwks_ttl_seconds=int(env.get("COGNITO_JWKS_TTL") or _DEFAULT_JWKS_TTL),
            token_use=token_use,
            leeway=float(env.get("COGNITO_LEEWAY") or 0),
        )

    @property
    def issuer(self) -> str:
        return cognito_issuer(self.region, self.user_pool_id)

    @property
    def jwks_url(self) -> str:
        return cognito_jwks_url(self.region, self.user_pool_id)
