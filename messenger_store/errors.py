"""Exception types raised by the local state store."""
from typing import Optional


class StateStoreError(Exception):
    """Base class for every failure the store reports to its caller."""


class StorageError(StateStoreError):
    """A file could not be read, written, removed or permission-restricted."""


class FormatError(StateStoreError):
    """A document or ciphertext blob is malformed."""


class EncodingError(StateStoreError):
    """Decrypted bytes are not valid UTF-8."""


class AuthenticationError(StateStoreError):
    """The ciphertext failed authentication (tampered, corrupted or wrong key)."""


class StateError(StateStoreError):
    """The operation needs an authenticated session and there is none."""


class CredentialRestoreError(StateStoreError):
    """A remembered password exists but could not be restored."""

    def __init__(self, message: str = "Saved password could not be restored", email: Optional[str] = None):
        super().__init__(message)
        self.email = email
