"""Flask extension protecting routes with the token engine.

Security Model:
1. Extract token from request (header or cookie)
2. Decode it with the TokenEngine (issuer-pinned key, then fallback keys)
3. Store verified claims in ``flask.g.jwt`` for route access
4. Convert auth errors to HTTP responses (401, or 500 for misconfiguration)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from functools import wraps
from typing import TYPE_CHECKING, Any, Final

from flask import Flask, abort, g

from .config import JWTSettings
from .engine import TokenEngine
from .errors import AuthError, ConfigurationError
from .extractors import BearerExtractor

if TYPE_CHECKING:
    from .protocols import Claims, Extractor, ViewFunc

logger = logging.getLogger(__name__)

_EXT_KEY: Final[str] = "jwt_trust"
"""Flask extensions registry key for AuthExtension."""


class AuthExtension:
    """
    Flask decorator glue for token authentication.

    Pattern:
        auth = AuthExtension()
        auth.init_app(app)  # builds a TokenEngine from app.config JWT_* keys

    Usage:
        @app.get("/me")
        @auth.require()
        def me():
            return {"sub": g.jwt["sub"]}
    """

    def __init__(
        self,
        engine: TokenEngine | None = None,
        extractor: Extractor | None = None,
    ) -> None:
        self._engine: TokenEngine | None = engine
        self._extractor: Extractor = extractor or BearerExtractor()

    def init_app(
        self,
        app: Flask,
        *,
        engine: TokenEngine | None = None,
        extractor: Extractor | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Register the extension on ``app``.

        When no engine was given here or at construction, one is built from
        ``app.config`` (``JWT_SECRET``, ``JWT_KEYS_DIRECTORY``, ...).
        Uncaught AuthError raised by views (e.g. from ``encode``) is answered
        with its ``error_code`` and a JSON body.

        Raises:
            ConfigurationError: No engine given and ``JWT_SECRET`` is not set.
        """
        if engine is not None:
            self._engine = engine
        if extractor is not None:
            self._extractor = extractor
        if self._engine is None:
            self._engine = TokenEngine.from_settings(
                JWTSettings.from_mapping(app.config), environ=environ
            )

        app.register_error_handler(AuthError, _auth_error_response)
        app.extensions[_EXT_KEY] = self

    @property
    def engine(self) -> TokenEngine:
        if self._engine is None:
            raise ConfigurationError("AuthExtension is not initialized")
        return self._engine

    def encode(self, payload: Mapping[str, Any]) -> str:
        """Issue a token with the configured engine."""
        return self.engine.encode(payload)

    def decode(self, token: str) -> Claims:
        return self.engine.decode(token)

    def require(self):
        """Decorator that rejects requests without a verifiable token.

        Error mapping:
        - ``MissingToken``       -> HTTP 401
        - ``TokenInvalidError``  -> HTTP 401
        - ``ConfigurationError`` -> HTTP 500
        - Any other Error        -> HTTP 401 ("Authentication failed")

        Side Effects:
            Writes decoded claims to ``flask.g.jwt`` before calling the view.
        """

        def decorator(view: ViewFunc) -> ViewFunc:
            @wraps(view)
            def wrapper(*args: Any, **kwargs: Any) -> Any:
                try:
                    token = self._extractor.extract()
                    g.jwt = self.engine.decode(token)
                except AuthError as e:
                    logger.info("Request rejected: %s", e.description)
                    abort(e.error_code, description=e.description)
                except Exception:
                    logger.exception("Unexpected error while authenticating request")
                    abort(401, description="Authentication failed")

                return view(*args, **kwargs)

            return wrapper

        return decorator


def _auth_error_response(error: AuthError):
    if error.error_code >= 500:
        logger.error("Token operation failed: %s", error.description)
    return {"error": error.description}, error.error_code
