"""Settings for the token engine.

Settings come from process environment variables (optionally seeded from a
``.env`` file) or from any mapping such as Flask's ``app.config``.

Recognized keys (with the default ``JWT_`` prefix):

- ``JWT_SECRET``: shared secret for HS256 signing and the final fallback key.
  Required.
- ``JWT_KEYS_DIRECTORY``: directory scanned for key files. Optional.
- ``JWT_PRIVATE_KEY_PATTERN``: glob for the private key file.
- ``JWT_PUBLIC_KEY_PATTERN``: glob for public key files.
- ``JWT_ISSUER_KEY_PREFIX``: prefix of per-issuer trust variables.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final

from dotenv import load_dotenv

from .errors import ConfigurationError

DEFAULT_PRIVATE_KEY_PATTERN: Final[str] = "jwt.*.key"
DEFAULT_PUBLIC_KEY_PATTERN: Final[str] = "jwt.*.key.pub"
DEFAULT_ISSUER_KEY_PREFIX: Final[str] = "JWT_PUBLIC_KEY_"


@dataclass(frozen=True, slots=True)
class JWTSettings:
    """Immutable configuration for a key store and token engine.

    Attributes:
        secret: Shared secret. Never empty.
        keys_directory: Directory holding ``jwt.*.key`` / ``jwt.*.key.pub``
            files. None disables file-based keys.
        private_key_pattern: Glob matching private key files.
        public_key_pattern: Glob matching public key files.
        issuer_key_prefix: Environment variable prefix for issuer trust keys.
    """

    secret: bytes
    keys_directory: str | None = None
    private_key_pattern: str = DEFAULT_PRIVATE_KEY_PATTERN
    public_key_pattern: str = DEFAULT_PUBLIC_KEY_PATTERN
    issuer_key_prefix: str = DEFAULT_ISSUER_KEY_PREFIX

    def __post_init__(self) -> None:
        if not self.secret:
            raise ConfigurationError("JWT secret must not be empty")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any], prefix: str = "JWT_") -> JWTSettings:
        """Build settings from a mapping such as ``os.environ`` or ``app.config``.

        Raises:
            ConfigurationError: If the secret is missing or empty.
        """
        secret = values.get(f"{prefix}SECRET")
        if not secret:
            raise ConfigurationError(f"{prefix}SECRET is not configured")
        if isinstance(secret, str):
            secret = secret.encode("utf-8")

        return cls(
            secret=secret,
            keys_directory=values.get(f"{prefix}KEYS_DIRECTORY") or None,
            private_key_pattern=values.get(f"{prefix}PRIVATE_KEY_PATTERN")
            or DEFAULT_PRIVATE_KEY_PATTERN,
            public_key_pattern=values.get(f"{prefix}PUBLIC_KEY_PATTERN")
            or DEFAULT_PUBLIC_KEY_PATTERN,
            issuer_key_prefix=values.get(f"{prefix}ISSUER_KEY_PREFIX")
            or DEFAULT_ISSUER_KEY_PREFIX,
        )

    @classmethod
    def from_env(cls, prefix: str = "JWT_", dotenv_path: str | None = None) -> JWTSettings:
        """Build settings from the process environment.

        A ``.env`` file is loaded first; variables already set in the
        environment take precedence over it.
        """
        load_dotenv(dotenv_path)
        return cls.from_mapping(os.environ, prefix=prefix)
