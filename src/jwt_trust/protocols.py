"""Protocol definitions for the token engine.

This module defines structural interfaces using Protocol (PEP 544) for:
- Key resolution (signing key, fallback pool, issuer trust)
- Token decoding
- Token extraction from HTTP requests

Any class that implements the required methods satisfies the protocol, which
keeps the engine independent of where keys live and easy to test with fakes.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias

if TYPE_CHECKING:
    from .materials import KeyMaterial

# ============================================================================
# Type Aliases
# ============================================================================

Claims: TypeAlias = dict[str, Any]
"""Decoded token payload: claim name to scalar value, in token order."""

ViewFunc: TypeAlias = Callable[..., Any]
"""Type alias for Flask view functions."""


# ============================================================================
# Core Protocols
# ============================================================================


class KeyStore(Protocol):
    """Protocol for resolving signing and verification keys.

    Implementations must not cache between calls: a rotated key takes effect
    on the next call.
    """

    def resolve_private_key(self) -> KeyMaterial:
        """Return the material to sign new tokens with.

        Returns:
            The single private key if exactly one is configured, otherwise
            the shared secret.

        Raises:
            AmbiguousKeyError: More than one private key is configured.
        """
        ...

    def resolve_verification_materials(self) -> list[KeyMaterial]:
        """Return the ordered fallback verification pool.

        The shared secret is always present and always last. Never raises.
        """
        ...

    def resolve_issuer_key(self, issuer: str) -> KeyMaterial | None:
        """Return the public key trusted for ``issuer``, or None.

        Absence is a normal condition. Never raises.
        """
        ...


class TokenDecoder(Protocol):
    """Protocol for anything that turns a raw token into verified claims."""

    def decode(self, token: str) -> Claims:
        """Verify a token and return its claims.

        Raises:
            TokenInvalidError: Token is malformed or no trusted key verifies it.
        """
        ...


class Extractor(Protocol):
    """Protocol for extracting a raw token from the current Flask request."""

    def extract(self) -> str:
        """Return the raw token string.

        Raises:
            MissingToken: Token not found or improperly formatted.
        """
        ...
