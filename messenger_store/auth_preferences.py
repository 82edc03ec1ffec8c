"""Remember-me preferences with the password encrypted at rest."""
import logging
from pathlib import Path
from typing import Optional, Tuple

from .config import ENCRYPTION_KEY_FILE
from .crypto import CredentialCipher, KeyProvider
from .models import CredentialPreferences
from .storage import RecordStore

logger = logging.getLogger(__name__)


class PreferencesManager:
    """Stores sign-in preferences; a password is only ever kept encrypted.

    The key file lives next to the preferences file unless a cipher is
    injected.
    """

    def __init__(self, storage_path: Path, cipher: Optional[CredentialCipher] = None):
        storage_path = Path(storage_path)
        if cipher is None:
            cipher = CredentialCipher(KeyProvider(storage_path.parent / ENCRYPTION_KEY_FILE))
        self.cipher = cipher
        self.store: RecordStore[CredentialPreferences] = RecordStore(
            storage_path,
            CredentialPreferences,
            default=CredentialPreferences,
            private=True,
            name="auth preferences",
        )

    def get_preferences(self) -> CredentialPreferences:
        return self.store.get()

    def save_preferences(self, preferences: CredentialPreferences, password: Optional[str] = None) -> None:
        """Persist ``preferences``, encrypting ``password`` when it should be remembered.

        Any previously stored ciphertext is dropped unless a new password is
        both supplied and allowed by ``remember_password``.
        """
        prefs = preferences.model_copy()
        if password is not None and prefs.remember_password:
            prefs.encrypted_password = self.cipher.encrypt(password)
        else:
            prefs.encrypted_password = None

        self.store.replace(prefs)
        logger.info(
            "Saved auth preferences (remember_me=%s, remember_password=%s)",
            prefs.remember_me,
            prefs.remember_password,
        )

    def get_remembered_credentials(self) -> Tuple[Optional[str], Optional[str]]:
        """Return ``(email, password)``; cipher errors propagate to the caller."""
        prefs = self.store.get()
        password = None
        if prefs.encrypted_password is not None:
            password = self.cipher.decrypt(prefs.encrypted_password)
        return prefs.remembered_email, password

    def clear_preferences(self) -> None:
        self.store.reset()
        logger.info("Cleared auth preferences")
