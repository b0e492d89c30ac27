"""
Filesystem and environment key store.

Resolves signing and verification keys from a directory of PEM files and
per-issuer trusted public keys from environment variables.

Resolution Sources
------------------
1) Key directory
    - ``jwt.*.key``      private keys (at most one may exist)
    - ``jwt.*.key.pub``  public keys (any number)

2) Shared secret
    - signs when no private key file exists
    - always the last entry of the verification pool

3) Environment
    - ``JWT_PUBLIC_KEY_<ISSUER>`` holds a base64-encoded PEM public key
      trusted for tokens whose ``iss`` normalizes to ``<ISSUER>``

Notes
-----
- Nothing is cached. Every call re-reads files and environment so a rotated
  key takes effect on the next call without a restart.
- Only issuer lookups and public key loading are lenient (log and skip).
  Private key problems propagate so signing never silently degrades.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
import re
import string
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ..config import (
    DEFAULT_ISSUER_KEY_PREFIX,
    DEFAULT_PRIVATE_KEY_PATTERN,
    DEFAULT_PUBLIC_KEY_PATTERN,
)
from ..errors import AmbiguousKeyError
from ..materials import KeyMaterial
from ..protocols import KeyStore

if TYPE_CHECKING:
    from ..config import JWTSettings

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^A-Z0-9]+")
_TRIM_CHARS = " \t\n\r\0\x0b"
_ASCII_UPPER = str.maketrans(string.ascii_lowercase, string.ascii_uppercase)


def normalize_issuer(issuer: str) -> str:
    """Map an issuer claim to an environment-variable-safe identifier.

    Trims ASCII whitespace, uppercases ASCII letters, then collapses every
    run of characters outside ``[A-Z0-9]`` into a single underscore.
    Non-ASCII characters are never case-folded, so they become underscores::

        >>> normalize_issuer(" https://auth.example.com/ ")
        'HTTPS_AUTH_EXAMPLE_COM_'
        >>> normalize_issuer("stra\u00dfe")
        'STRA_E'
    """
    trimmed = str(issuer).strip(_TRIM_CHARS)
    return _NON_ALNUM.sub("_", trimmed.translate(_ASCII_UPPER))


class FileSystemKeyStore(KeyStore):
    """
    Resolves key material from a key directory, a shared secret and the
    process environment.

    Parameters
    ----------
    secret : bytes | str
        Shared secret for HS256. Must not be empty.

    keys_directory : str | os.PathLike | None
        Directory scanned for key files. None or a missing directory means
        no file-based keys.

    private_key_pattern, public_key_pattern : str
        Glob patterns for private and public key files.

    issuer_key_prefix : str
        Prefix of per-issuer trust variables.

    environ : Mapping[str, str] | None
        Environment to read issuer keys from. Defaults to ``os.environ``,
        looked up at call time.
    """

    def __init__(
        self,
        secret: bytes | str,
        keys_directory: str | os.PathLike[str] | None = None,
        *,
        private_key_pattern: str = DEFAULT_PRIVATE_KEY_PATTERN,
        public_key_pattern: str = DEFAULT_PUBLIC_KEY_PATTERN,
        issuer_key_prefix: str = DEFAULT_ISSUER_KEY_PREFIX,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        if isinstance(secret, str):
            secret = secret.encode("utf-8")
        if not secret:
            raise ValueError("secret must not be empty")

        self._secret = secret
        self._directory = Path(keys_directory) if keys_directory is not None else None
        self._private_pattern = private_key_pattern
        self._public_pattern = public_key_pattern
        self._issuer_prefix = issuer_key_prefix
        self._environ = environ

    @classmethod
    def from_settings(
        cls, settings: JWTSettings, environ: Mapping[str, str] | None = None
    ) -> FileSystemKeyStore:
        return cls(
            settings.secret,
            settings.keys_directory,
            private_key_pattern=settings.private_key_pattern,
            public_key_pattern=settings.public_key_pattern,
            issuer_key_prefix=settings.issuer_key_prefix,
            environ=environ,
        )

    def resolve_private_key(self) -> KeyMaterial:
        files = self._glob(self._private_pattern)

        if len(files) > 1:
            logger.warning(
                "Found %d private key files in %s, refusing to pick one",
                len(files),
                self._directory,
            )
            raise AmbiguousKeyError("Multiple private keys found")

        # No private key: sign with the shared secret
        if not files:
            return KeyMaterial.shared_secret(self._secret)

        path = files[0]
        key = serialization.load_pem_private_key(path.read_bytes(), password=None)
        return KeyMaterial.asymmetric(key, str(path))

    def resolve_verification_materials(self) -> list[KeyMaterial]:
        materials: list[KeyMaterial] = []

        for path in self._glob(self._public_pattern):
            try:
                key = serialization.load_pem_public_key(path.read_bytes())
            except (OSError, ValueError, TypeError) as e:
                logger.warning("Skipping unusable public key file %s: %s", path, e)
                continue
            if not isinstance(key, rsa.RSAPublicKey):
                logger.warning("Skipping non-RSA public key file %s", path)
                continue
            materials.append(KeyMaterial.asymmetric(key, str(path)))

        # The secret is always tried last
        materials.append(KeyMaterial.shared_secret(self._secret))
        return materials

    def resolve_issuer_key(self, issuer: str) -> KeyMaterial | None:
        name = self._issuer_prefix + normalize_issuer(issuer)
        environ = self._environ if self._environ is not None else os.environ
        encoded = environ.get(name)
        if not encoded:
            return None

        try:
            pem = base64.b64decode(encoded, validate=False)
            key = serialization.load_pem_public_key(pem)
        except (binascii.Error, ValueError, TypeError) as e:
            logger.warning("Ignoring undecodable issuer key in %s: %s", name, e)
            return None

        if not isinstance(key, rsa.RSAPublicKey):
            logger.warning("Ignoring non-RSA issuer key in %s", name)
            return None

        return KeyMaterial.asymmetric(key, name)

    def _glob(self, pattern: str) -> list[Path]:
        if self._directory is None or not self._directory.is_dir():
            return []
        return sorted(p for p in self._directory.glob(pattern) if p.is_file())
