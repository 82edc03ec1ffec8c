"""At-rest encryption for remembered passwords."""
import base64
import binascii
import logging
import os
from pathlib import Path

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import AuthenticationError, EncodingError, FormatError, StorageError
from .storage import OWNER_ONLY, restrict_permissions

logger = logging.getLogger(__name__)

KEY_SIZE = 32
NONCE_SIZE = 12


class KeyProvider:
    """Loads the installation's AES-256 key, generating it on first use."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def get_or_create_key(self) -> bytes:
        if self.path.exists():
            return self._read_key()

        key = os.urandom(KEY_SIZE)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to write encryption key: {exc}") from exc
        try:
            # created owner-only; never visible with wider permissions
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0), OWNER_ONLY)
        except FileExistsError:
            # another process created it first
            return self._read_key()
        except OSError as exc:
            raise StorageError(f"Failed to write encryption key: {exc}") from exc
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(key)
        except OSError as exc:
            raise StorageError(f"Failed to write encryption key: {exc}") from exc
        restrict_permissions(self.path)
        logger.info("Generated new encryption key at %s", self.path)
        return key

    def _read_key(self) -> bytes:
        try:
            key = self.path.read_bytes()
        except OSError as exc:
            raise StorageError(f"Failed to read encryption key: {exc}") from exc
        if len(key) != KEY_SIZE:
            raise StorageError(f"Invalid encryption key size: expected {KEY_SIZE} bytes, found {len(key)}")
        return key


class CredentialCipher:
    """AES-256-GCM encryption of a single password string.

    A blob is ``base64(nonce || ciphertext || tag)`` with a fresh random
    nonce per call. The key is read from the provider on every call.
    """

    def __init__(self, key_provider: KeyProvider):
        self.key_provider = key_provider

    def encrypt(self, plaintext: str) -> str:
        key = self.key_provider.get_or_create_key()
        nonce = os.urandom(NONCE_SIZE)
        ciphertext = AESGCM(key).encrypt(nonce, plaintext.encode("utf-8"), None)
        return base64.b64encode(nonce + ciphertext).decode("ascii")

    def decrypt(self, blob: str) -> str:
        key = self.key_provider.get_or_create_key()
        try:
            combined = base64.b64decode(blob, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise FormatError(f"Failed to decode encrypted password: {exc}") from exc
        if len(combined) < NONCE_SIZE:
            raise FormatError("Invalid encrypted password format")

        nonce, ciphertext = combined[:NONCE_SIZE], combined[NONCE_SIZE:]
        try:
            plaintext = AESGCM(key).decrypt(nonce, ciphertext, None)
        except InvalidTag as exc:
            raise AuthenticationError("Encrypted password failed authentication") from exc

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise EncodingError(f"Invalid UTF-8 in decrypted password: {exc}") from exc
