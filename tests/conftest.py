import base64
from dataclasses import dataclass
from pathlib import Path

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from flask import Flask

from jwt_trust import FileSystemKeyStore, TokenEngine


@pytest.fixture
def payload() -> dict:
    return {
        "sub": "fidmaster",
        "iat": 123456,
        "exp": 123456 + 3600,
        "jat": "foobarbaz",
    }


@pytest.fixture
def hs256_token() -> str:
    """Token for ``payload`` signed with "secret", header fields unsorted."""
    return (
        "eyJ0eXAiOiJKV1QiLCJhbGciOiJIUzI1NiJ9."
        "eyJzdWIiOiJmaWRtYXN0ZXIiLCJpYXQiOjEyMzQ1NiwiZXhwIjoxMjcwNTYsImphdCI6ImZvb2JhcmJheiJ9."
        "4cLrK125FhNhtEsOfzEvLb9iNobv-_1oBLJsx2J9xtw"
    )


@dataclass(frozen=True)
class KeyPair:
    private_pem: bytes
    public_pem: bytes

    @property
    def public_b64(self) -> str:
        return base64.b64encode(self.public_pem).decode("ascii")


def _generate_keypair() -> KeyPair:
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return KeyPair(private_pem=private_pem, public_pem=public_pem)


@pytest.fixture(scope="session")
def keypairs() -> dict[str, KeyPair]:
    """Named RSA key pairs, generated once per session (2048-bit is slow)."""
    return {name: _generate_keypair() for name in ("app", "another", "foo")}


@pytest.fixture(scope="session")
def ec_public_pem() -> bytes:
    """PEM public key of a P-256 pair, a valid key of a kind RS256 cannot use."""
    private_key = ec.generate_private_key(ec.SECP256R1())
    return private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


@pytest.fixture
def keys_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "keys"
    directory.mkdir()
    return directory


@pytest.fixture
def write_key(keys_dir: Path):
    """
    Factory fixture writing PEM files into ``keys_dir``.

    Usage in tests:
        write_key("jwt.app.key", keypairs["app"].private_pem)
    """

    def _write(name: str, data: bytes) -> Path:
        path = keys_dir / name
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture
def environ() -> dict[str, str]:
    """Isolated environment mapping for issuer trust lookups."""
    return {}


@pytest.fixture()
def app():
    app = Flask(__name__)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def make_engine(keys_dir: Path, environ: dict[str, str]):
    """
    Factory fixture returning a TokenEngine over ``keys_dir`` and ``environ``.

    Usage in tests:
        engine = make_engine()
        engine = make_engine(secret="INVALID_secret")
    """

    def _make(*, secret: str = "secret") -> TokenEngine:
        return TokenEngine(FileSystemKeyStore(secret, keys_dir, environ=environ))

    return _make
