"""Token issuing and verification errors.

This module defines the exception hierarchy raised at the public boundary of
the token engine. All errors inherit from AuthError to allow catch-all error
handling, and each carries the HTTP status a web layer should answer with.

Security Note:
    Messages describe the failure class only (parse failure, no key matched,
    ambiguous key files). They never include token contents or key material.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base exception for all token issuing and verification failures.

    Attributes:
        error_code: HTTP status code a web layer should respond with.
        description: Human-readable message (the first exception argument).
    """

    error_code: int = 401

    @property
    def description(self) -> str:
        return str(self.args[0]) if self.args else self.__class__.__name__


class MissingToken(AuthError):  # noqa: N818
    """Raised when no authentication token is found in the request.

    This occurs when:
    - The Authorization header is missing
    - The Authorization header is not "Bearer <token>"
    - The configured cookie is missing (cookie-based extraction)
    """


class TokenInvalidError(AuthError):
    """Raised when a token cannot be parsed or no trusted key verifies it.

    The two causes are distinguishable by message:
    - "Could not decode token: ..." for structurally malformed input
    - "Token Signature could not be verified." once every candidate key
      (issuer-trusted key and fallback pool) has been exhausted

    This is the expected outcome for forged or corrupted tokens and should be
    answered with 401, not treated as a system fault.
    """


class TokenCreationError(AuthError):
    """Raised when a token cannot be built or signed.

    Carries the underlying cause's message and chains the original exception.
    Indicates operational misconfiguration rather than a bad request.
    """

    error_code = 500


class AmbiguousKeyError(TokenCreationError):
    """Raised when more than one private-key file is found.

    The signer cannot know which key the caller intends to sign with, so key
    resolution fails before any signing is attempted. Subclasses
    TokenCreationError so callers handling creation failures still catch it.
    """


class ConfigurationError(AuthError):
    """Raised when settings are missing or invalid (e.g. empty JWT secret)."""

    error_code = 500
