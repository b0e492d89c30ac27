"""Token extraction from Flask requests.

Implementations of the Extractor protocol:
- BearerExtractor: ``<header>: <scheme> <token>`` (default
  ``Authorization: Bearer``)
- CookieExtractor: a named cookie
"""

from __future__ import annotations

from flask import request

from .errors import MissingToken


class BearerExtractor:
    """Reads a token from an authorization-style header.

    Example:
        ```python
        # Authorization: Bearer <token>
        extractor = BearerExtractor()

        # X-Service-Token: JWT <token>
        extractor = BearerExtractor(header="X-Service-Token", scheme="JWT")
        ```
    """

    def __init__(self, header: str = "Authorization", scheme: str = "Bearer") -> None:
        if not header.strip() or not scheme.strip():
            raise ValueError("header and scheme cannot be empty")
        self._header = header
        self._scheme = scheme.lower()

    def extract(self) -> str:
        value = request.headers.get(self._header, "").strip()
        if not value:
            raise MissingToken(f"Missing {self._header} header")

        scheme, _, token = value.partition(" ")
        if scheme.lower() != self._scheme:
            raise MissingToken(f"Invalid {self._header} header (expected '{self._scheme} <token>')")

        token = token.strip()
        if not token:
            raise MissingToken("Bearer token is empty")
        return token


class CookieExtractor:
    """Reads a token from a cookie. Pair with CSRF protection."""

    def __init__(self, cookie_name: str = "access_token") -> None:
        if not cookie_name or not cookie_name.strip():
            raise ValueError("cookie_name cannot be empty")
        self._name = cookie_name

    def extract(self) -> str:
        token = request.cookies.get(self._name)
        if not token:
            raise MissingToken(f"Missing cookie '{self._name}'")
        return token
