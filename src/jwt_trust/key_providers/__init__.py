"""
Key store implementations for resolving signing and verification keys.

This package contains implementations of the KeyStore protocol.
"""

from .filesystem import FileSystemKeyStore, normalize_issuer

__all__ = ["FileSystemKeyStore", "normalize_issuer"]
