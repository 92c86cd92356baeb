"""Key selection and materialization.

Turns the ``kid`` from a token header into a usable public key object by
looking it up in a KeySet and handing the raw JWK to PyJWT.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from jwt import PyJWK
from jwt.exceptions import PyJWTError

from .errors import KeyNotFound, MaterializationError

if TYPE_CHECKING:
    from .key_set import KeySet, SigningKey


class KeyResolver:
    """Selects and materializes the signing key named by a token's ``kid``.

    Stateless; one instance can be shared by every request.

    Keys published with a ``use`` other than ``"sig"`` (encryption keys) never
    match. If the provider publishes the same ``kid`` twice, the first entry
    is used.
    """

    def resolve(self, kid: str, key_set: KeySet, alg: str | None = None) -> PyJWK:
        """Return the materialized public key for ``kid``.

        Args:
            kid: Key ID from the token header.
            key_set: Key set to search.
            alg: The token's algorithm. Used for keys that do not declare
                their own ``alg``; a declared one always wins.

        Raises:
            KeyNotFound: No signing key with this ``kid`` in the key set.
            MaterializationError: The key data is corrupt, or uses an
                algorithm PyJWT cannot load or that does not fit its ``kty``.
        """
        signing_key = key_set.find(kid)
        if signing_key is None or signing_key.use not in (None, "sig"):
            raise KeyNotFound(f"No signing key with kid {kid!r} in key set")

        return self.materialize(signing_key, alg)

    @staticmethod
    def materialize(signing_key: SigningKey, alg: str | None = None) -> PyJWK:
        # A kty that does not fit the algorithm fails inside PyJWK.
        try:
            return PyJWK.from_dict(dict(signing_key.data), signing_key.alg or alg)
        except (PyJWTError, KeyError, ValueError, TypeError) as e:
            raise MaterializationError(
                f"Cannot materialize key {signing_key.kid!r} ({signing_key.kty}): {e}"
            ) from e
