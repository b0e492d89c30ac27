"""
Multi-key JWT issuing and verification.

Signs tokens with a single private key file (RS256) or a shared secret
(HS256), and verifies tokens against an issuer-pinned public key first and
every locally known key after that.

High-level flow
---------------
Encode:
1. Drop ``None`` claims.
2. Ask the KeyStore for the signing key:
   - no ``jwt.*.key`` file   -> shared secret, HS256
   - one ``jwt.*.key`` file  -> that private key, RS256
   - several                 -> AmbiguousKeyError
3. Sign and return the compact token.

Decode:
1. Parse the token without trusting it (TokenInvalidError if malformed).
2. If it has ``iss``, look up ``JWT_PUBLIC_KEY_<ISSUER>`` and verify with RS256.
3. Otherwise, or on failure, try every ``jwt.*.key.pub`` file, then the secret.
4. TokenInvalidError if nothing verified.

Example usage
-------------

.. code-block:: python

    from jwt_trust import FileSystemKeyStore, JWTSettings, TokenEngine

    engine = TokenEngine.from_settings(JWTSettings.from_env())

    token = engine.encode({"sub": "fidmaster", "iss": "billing"})
    claims = engine.decode(token)

    # Flask
    from jwt_trust import AuthExtension

    auth = AuthExtension()
    auth.init_app(app)  # JWT_SECRET / JWT_KEYS_DIRECTORY from app.config

    @app.route("/protected")
    @auth.require()
    def protected_route():
        return {"sub": g.jwt["sub"]}
"""

# Configuration
from .config import JWTSettings

# Engine
from .engine import TokenEngine

# Errors
from .errors import (
    AmbiguousKeyError,
    AuthError,
    ConfigurationError,
    MissingToken,
    TokenCreationError,
    TokenInvalidError,
)

# Extractors
from .extractors import BearerExtractor, CookieExtractor

# Flask extension
from .flask_extension import AuthExtension

# Key stores
from .key_providers import FileSystemKeyStore, normalize_issuer

# Key material
from .materials import KeyKind, KeyMaterial, algorithm_for

# Protocols
from .protocols import Claims, Extractor, KeyStore, TokenDecoder, ViewFunc

__all__ = [
    # Errors
    "AuthError",
    "AmbiguousKeyError",
    "ConfigurationError",
    "MissingToken",
    "TokenCreationError",
    "TokenInvalidError",
    # Protocols
    "Claims",
    "Extractor",
    "KeyStore",
    "TokenDecoder",
    "ViewFunc",
    # Configuration
    "JWTSettings",
    # Key material
    "KeyKind",
    "KeyMaterial",
    "algorithm_for",
    # Key stores
    "FileSystemKeyStore",
    "normalize_issuer",
    # Engine
    "TokenEngine",
    # Extractors
    "BearerExtractor",
    "CookieExtractor",
    # Flask extension
    "AuthExtension",
]
