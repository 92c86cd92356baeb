"""Typed, read-only view over a decoded token payload.

ClaimSet behaves like the plain mapping PyJWT returns, so handlers can still
do ``claims["sub"]``, but the registered claims the verifier and policy rely
on go through accessors that raise ClaimTypeError on an unexpected shape
instead of failing somewhere downstream.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from .errors import ClaimTypeError


def _number(name: str, value: Any) -> float:
    # bool is an int subclass; `"exp": true` is not a timestamp.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ClaimTypeError(f"Claim {name!r} must be a number, got {type(value).__name__}")
    if not math.isfinite(value):
        raise ClaimTypeError(f"Claim {name!r} must be a finite number, got {value!r}")
    return float(value)


def _string(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ClaimTypeError(f"Claim {name!r} must be a string, got {type(value).__name__}")
    return value


class ClaimSet(Mapping[str, Any]):
    """Immutable mapping of claim name to value with typed accessors.

    Examples:
        >>> claims = ClaimSet({"sub": "u1", "aud": "client-123", "exp": 1700000000})
        >>> claims.audiences
        frozenset({'client-123'})
        >>> claims.expiry
        1700000000.0
        >>> ClaimSet({"exp": "soon"}).expiry
        Traceback (most recent call last):
        ...
        cognito_verification.errors.ClaimTypeError: Claim 'exp' must be a number, got str
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any]) -> None:
        self._data: Mapping[str, Any] = MappingProxyType(dict(data))

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ClaimSet({dict(self._data)!r})"

    def _optional_number(self, name: str) -> float | None:
        if name not in self._data:
            return None
        return _number(name, self._data[name])

    def _optional_string(self, name: str) -> str | None:
        if name not in self._data:
            return None
        return _string(name, self._data[name])

    @property
    def expiry(self) -> float:
        """``exp``, required."""
        if "exp" not in self._data:
            raise ClaimTypeError("Token has no 'exp' claim")
        return _number("exp", self._data["exp"])

    @property
    def not_before(self) -> float | None:
        return self._optional_number("nbf")

    @property
    def issued_at(self) -> float | None:
        return self._optional_number("iat")

    @property
    def audiences(self) -> frozenset[str]:
        """``aud`` as a set. Empty when the claim is absent.

        A single string and a list of strings are both accepted; any other
        shape, including a list holding non-strings, raises ClaimTypeError.
        """
        raw = self._data.get("aud")
        if raw is None:
            return frozenset()
        if isinstance(raw, str):
            return frozenset({raw})
        if isinstance(raw, (list, tuple)) and all(isinstance(a, str) for a in raw):
            return frozenset(raw)
        raise ClaimTypeError("Claim 'aud' must be a string or a list of strings")

    @property
    def issuer(self) -> str | None:
        return self._optional_string("iss")

    @property
    def subject(self) -> str | None:
        return self._optional_string("sub")

    @property
    def token_use(self) -> str | None:
        """Cognito's ``token_use``: ``"id"`` or ``"access"``."""
        return self._optional_string("token_use")

    @property
    def client_id(self) -> str | None:
        """Cognito access tokens name the app client here instead of in ``aud``."""
        return self._optional_string("client_id")

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)
