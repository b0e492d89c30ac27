"""Signing and verification key material.

Key material is a tagged value: either a shared secret (HMAC-SHA256) or an
asymmetric RSA key (RSA-SHA256). The algorithm used with a key is a pure
function of its tag, never of the runtime type of the key object.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Final, TypeAlias


class KeyKind(Enum):
    """Discriminator for key material."""

    SHARED_SECRET = "secret"
    ASYMMETRIC = "asymmetric"


_ALGORITHMS: Final[dict[KeyKind, str]] = {
    KeyKind.ASYMMETRIC: "RS256",
    KeyKind.SHARED_SECRET: "HS256",
}

ISSUER_TRUST_ALGORITHM: Final[str] = _ALGORITHMS[KeyKind.ASYMMETRIC]
"""Issuer trust entries are always RSA public keys."""


def algorithm_for(kind: KeyKind) -> str:
    """Return the JWS algorithm name used with keys of the given kind."""
    return _ALGORITHMS[kind]


@dataclass(frozen=True, slots=True)
class KeyMaterial:
    """A key tagged with its kind.

    Attributes:
        kind: SHARED_SECRET or ASYMMETRIC.
        key: ``bytes`` for a shared secret, a ``cryptography`` RSA private or
            public key object for asymmetric material.
        source: Where the key came from (file path, ``"secret"`` or an
            environment variable name). Used for logging only.
    """

    kind: KeyKind
    key: Any
    source: str

    @classmethod
    def shared_secret(cls, secret: bytes) -> KeyMaterial:
        return cls(KeyKind.SHARED_SECRET, secret, "secret")

    @classmethod
    def asymmetric(cls, key: Any, source: str) -> KeyMaterial:
        return cls(KeyKind.ASYMMETRIC, key, source)

    @property
    def algorithm(self) -> str:
        return algorithm_for(self.kind)

    def __repr__(self) -> str:
        # never expose secret bytes
        return f"KeyMaterial(kind={self.kind.name}, source={self.source!r})"


SigningMaterial: TypeAlias = KeyMaterial
"""Key material used by ``encode``: the single private key or the secret."""

VerificationMaterial: TypeAlias = KeyMaterial
"""One candidate of the fallback verification pool."""
