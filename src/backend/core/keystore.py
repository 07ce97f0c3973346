"""
Server key pair management for signed vote tokens.

A single RSA key pair signs every vote token issued by the deployment.
The keys are stored as two PEM files:

- private.pem (mode 0600) - used only when issuing tokens
- public.pem  (mode 0644) - published so anyone can verify a token

Regenerating the pair replaces both files and invalidates every token
signed with the previous private key. There is no rotation or versioning.
"""

import os
import secrets
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Union

import structlog
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from core.config import Settings, settings

logger = structlog.get_logger(__name__)

PRIVATE_KEY_MODE = 0o600
PUBLIC_KEY_MODE = 0o644
KEYS_DIR_MODE = 0o755

GENERATE_KEYS_HINT = "Run: python -m scripts.generate_keys"


class CryptoProviderError(Exception):
    """Raised when the crypto backend fails to generate keys or sign data."""

    pass


class KeyNotFoundError(Exception):
    """Raised when a server key file has not been provisioned."""

    pass


@dataclass(frozen=True)
class KeyPair:
    """PEM-encoded RSA key pair."""

    private_key: str
    public_key: str


@dataclass(frozen=True)
class KeyStoreConfig:
    """Locations of the private and public key files."""

    private_key_path: Path
    public_key_path: Path

    @classmethod
    def for_directory(
        cls,
        keys_dir: Union[str, Path],
        private_name: str = "private.pem",
        public_name: str = "public.pem",
    ) -> "KeyStoreConfig":
        keys_dir = Path(keys_dir)
        return cls(
            private_key_path=keys_dir / private_name,
            public_key_path=keys_dir / public_name,
        )

    @classmethod
    def from_settings(cls, config: Settings) -> "KeyStoreConfig":
        return cls(
            private_key_path=config.private_key_path,
            public_key_path=config.public_key_path,
        )


def generate_key_pair(key_size: int = 2048) -> KeyPair:
    """
    Generate a fresh RSA key pair for SHA-256 signing.

    Args:
        key_size: Modulus size in bits (2048 by default)

    Returns:
        KeyPair with a PKCS8 private key and a SubjectPublicKeyInfo public key

    Raises:
        CryptoProviderError: If the backend cannot generate the key
    """
    try:
        private_key = rsa.generate_private_key(
            public_exponent=65537,
            key_size=key_size,
        )

        private_pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
        public_pem = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    except Exception as e:
        logger.error("key_generation_failed", key_size=key_size, error=str(e))
        raise CryptoProviderError(f"Failed to generate key pair: {e}") from e

    logger.info("key_pair_generated", key_size=key_size)
    return KeyPair(
        private_key=private_pem.decode("ascii"),
        public_key=public_pem.decode("ascii"),
    )


class KeyStore:
    """
    Filesystem storage for the server key pair.

    Concurrent readers are safe. Concurrent writers are not coordinated here;
    key generation must be serialized by the operator.
    """

    def __init__(self, config: KeyStoreConfig):
        self.config = config

    @property
    def private_key_path(self) -> Path:
        return self.config.private_key_path

    @property
    def public_key_path(self) -> Path:
        return self.config.public_key_path

    def keys_exist(self) -> bool:
        """Check that both key files are present."""
        return self.private_key_path.exists() and self.public_key_path.exists()

    def store_key_pair(self, pair: KeyPair) -> None:
        """
        Persist a key pair, replacing any existing keys.

        Both keys are written to temporary siblings created with their final
        modes, and only renamed into place once both writes succeeded. A
        partially written private key is never visible under a permissive
        mode, and a failed write leaves the previous pair untouched.
        """
        for path in (self.private_key_path, self.public_key_path):
            path.parent.mkdir(mode=KEYS_DIR_MODE, parents=True, exist_ok=True)

        private_tmp = self._write_temp(self.private_key_path, pair.private_key, PRIVATE_KEY_MODE)
        try:
            public_tmp = self._write_temp(self.public_key_path, pair.public_key, PUBLIC_KEY_MODE)
        except BaseException:
            private_tmp.unlink(missing_ok=True)
            raise

        os.replace(private_tmp, self.private_key_path)
        os.replace(public_tmp, self.public_key_path)

        logger.info(
            "key_pair_stored",
            private_key_path=str(self.private_key_path),
            public_key_path=str(self.public_key_path),
        )

    def load_private_key(self) -> str:
        """
        Read the private key PEM.

        Raises:
            KeyNotFoundError: If the private key has not been generated
        """
        return self._read_key(self.private_key_path, "Private")

    def load_public_key(self) -> str:
        """
        Read the public key PEM.

        Raises:
            KeyNotFoundError: If the public key has not been generated
        """
        return self._read_key(self.public_key_path, "Public")

    def _read_key(self, path: Path, label: str) -> str:
        try:
            return path.read_text(encoding="ascii")
        except FileNotFoundError as e:
            logger.warning("key_file_missing", path=str(path))
            raise KeyNotFoundError(f"{label} key not found at {path}. {GENERATE_KEYS_HINT}") from e

    @staticmethod
    def _write_temp(path: Path, content: str, mode: int) -> Path:
        """Write content to a temporary sibling of path and return its location."""
        tmp_path = path.with_name(f".{path.name}.{secrets.token_hex(8)}.tmp")
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, mode)
        try:
            with os.fdopen(fd, "w", encoding="ascii") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            # umask may have narrowed the mode passed to os.open
            os.chmod(tmp_path, mode)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        return tmp_path


@lru_cache()
def get_key_store() -> KeyStore:
    """Get the KeyStore configured from application settings."""
    return KeyStore(KeyStoreConfig.from_settings(settings))
