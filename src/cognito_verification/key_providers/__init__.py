"""
Key provider implementations for resolving token signing keys.

This package contains implementations of the KeyProvider protocol,
allowing flexible resolution of signing keys from different sources.
"""

from .cognito import CognitoKeyProvider

__all__ = ["CognitoKeyProvider"]
