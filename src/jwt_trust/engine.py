"""Token encoding and trust-based verification using PyJWT.

This module provides the token engine that:
- Signs payloads with whichever key the key store resolves (RS256 for a
  private key file, HS256 for the shared secret)
- Verifies tokens against an issuer-pinned public key first, then against
  every locally known key
- Maps PyJWT and key loading exceptions to domain-specific error types

Verification Policy
-------------------
1. Parse the token without trusting it. Malformed input is rejected here.
2. If the token carries ``iss`` and a public key is configured for that
   issuer, verify with RS256 against that key only. Success returns at once.
3. Otherwise, or if step 2 failed, try each key of the fallback pool in
   order (public key files, then the shared secret).
4. No key verified: reject.

Only the signature is checked. Time-based claims (``exp``, ``nbf``, ``iat``)
are returned to the caller untouched by any validation.
"""

from __future__ import annotations

import logging
from calendar import timegm
from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any, Final

import jwt

from .errors import AmbiguousKeyError, TokenCreationError, TokenInvalidError
from .key_providers import FileSystemKeyStore, normalize_issuer
from .materials import ISSUER_TRUST_ALGORITHM, KeyMaterial

if TYPE_CHECKING:
    from .config import JWTSettings
    from .protocols import Claims, KeyStore

logger = logging.getLogger(__name__)

TIME_CLAIMS: Final[frozenset[str]] = frozenset({"iat", "nbf", "exp"})
"""Registered claims holding Unix timestamps."""


class TokenEngine:
    """Encodes and decodes tokens using keys from an injected KeyStore.

    This class implements the TokenDecoder protocol. It holds no mutable
    state, so one instance can serve concurrent callers; every call asks the
    key store for fresh key material.

    Example:
        ```python
        engine = TokenEngine(FileSystemKeyStore(b"secret", "/etc/jwt"))

        token = engine.encode({"sub": "fidmaster", "iss": "billing"})

        try:
            claims = engine.decode(token)
        except TokenInvalidError:
            # forged, corrupted or signed by an unknown key
        ```

    Attributes:
        _keys: KeyStore responsible for resolving signing and verification keys.
        _jws: PyJWS instance used for signature-only verification.
    """

    def __init__(self, key_store: KeyStore) -> None:
        self._keys = key_store
        self._jws = jwt.PyJWS()

    @classmethod
    def from_settings(
        cls, settings: JWTSettings, environ: Mapping[str, str] | None = None
    ) -> TokenEngine:
        """Build an engine backed by a FileSystemKeyStore."""
        return cls(FileSystemKeyStore.from_settings(settings, environ=environ))

    @property
    def key_store(self) -> KeyStore:
        return self._keys

    def encode(self, payload: Mapping[str, Any]) -> str:
        """Create a signed token from ``payload``.

        Entries whose value is None are dropped. ``datetime`` values are
        embedded as integer Unix timestamps.

        Args:
            payload: Claims to embed, in the order they should appear.

        Returns:
            Compact token string (``header.claims.signature``).

        Raises:
            AmbiguousKeyError: More than one private key file is configured.
            TokenCreationError: Any other failure building or signing the token.
        """
        try:
            claims = {
                name: _embeddable(value)
                for name, value in payload.items()
                if value is not None
            }
            material = self._keys.resolve_private_key()

            return jwt.encode(
                claims,
                material.key,
                algorithm=material.algorithm,
                sort_headers=False,
            )

        except AmbiguousKeyError as e:
            logger.error("Token creation refused: %s", e)
            raise AmbiguousKeyError(f"Could not create token: {e}") from e

        except Exception as e:
            logger.error("Token creation failed: %s", e)
            raise TokenCreationError(f"Could not create token: {e}") from e

    def decode(self, token: str) -> Claims:
        """Verify ``token`` and return its claims.

        Args:
            token: Raw compact token string.

        Returns:
            Claims in token order, with ``iat``/``nbf``/``exp`` as integers.

        Raises:
            TokenInvalidError: Token is malformed ("Could not decode token")
                or no trusted key verifies its signature ("Token Signature
                could not be verified.").
        """
        # Step 1: structural parse, nothing here is trusted yet
        try:
            claims = jwt.decode(token, options={"verify_signature": False})
        except Exception as e:
            raise TokenInvalidError(f"Could not decode token: {e}") from e

        # Step 2: issuer-pinned key, if one is configured
        if "iss" in claims and self._verify_issuer(token, claims["iss"]):
            return _normalize_claims(claims)

        # Step 3: every locally known key, secret last
        for material in self._keys.resolve_verification_materials():
            if self._verify(token, material, material.algorithm):
                logger.debug("Token verified with %s", material.source)
                return _normalize_claims(claims)

        raise TokenInvalidError("Token Signature could not be verified.")

    def _verify_issuer(self, token: str, issuer: Any) -> bool:
        material = self._keys.resolve_issuer_key(str(issuer))
        if material is None:
            logger.debug(
                "No trusted key for issuer %s, using fallback keys",
                normalize_issuer(str(issuer)),
            )
            return False

        if self._verify(token, material, ISSUER_TRUST_ALGORITHM):
            logger.debug("Token verified with issuer key %s", material.source)
            return True

        logger.debug(
            "Issuer key %s did not verify token, using fallback keys", material.source
        )
        return False

    def _verify(self, token: str, material: KeyMaterial, algorithm: str) -> bool:
        try:
            self._jws.decode(token, material.key, algorithms=[algorithm])
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            logger.debug("Key %s rejected token: %s", material.source, e)
            return False
        return True


def _embeddable(value: Any) -> Any:
    if isinstance(value, datetime):
        return timegm(value.utctimetuple())
    return value


def _normalize_claims(claims: Mapping[str, Any]) -> Claims:
    normalized: Claims = {}
    for name, value in claims.items():
        if name in TIME_CLAIMS and isinstance(value, float):
            value = int(value)
        normalized[name] = value
    return normalized
