"""Command surface the UI layer calls to read and change local state."""
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel

from .auth import SessionManager
from .auth_preferences import PreferencesManager
from .config import AUTH_FILE, AUTH_PREFERENCES_FILE, SETTINGS_FILE, current_profile, resolve_data_dir
from .errors import AuthenticationError, CredentialRestoreError, EncodingError, FormatError
from .models import (
    CredentialPreferences,
    FileSettings,
    NotificationSettings,
    SessionUser,
    SettingsRecord,
    StartupSettings,
    to_payload,
)
from .settings import SettingsManager

logger = logging.getLogger(__name__)

Emitter = Callable[[str, Any], None]
ModelT = TypeVar("ModelT", bound=BaseModel)

AUTH_CHANGED = "auth-changed"
AUTH_CLEARED = "auth-cleared"
SETTINGS_CHANGED = "settings-changed"
SETTINGS_RESET = "settings-reset"


def _coerce(model: Type[ModelT], value: Union[ModelT, Dict[str, Any]]) -> ModelT:
    if isinstance(value, model):
        return value
    return model.model_validate(value)


class StateController:
    """Owns the session, preferences and settings managers for one data directory.

    Every successful mutation of session or settings state is broadcast
    through ``emit(event, payload)`` so all open views stay in sync. A
    failed mutation raises and broadcasts nothing.
    """

    def __init__(self, data_dir: Path, emit: Optional[Emitter] = None, profile: Optional[str] = None):
        self.data_dir = Path(data_dir)
        self.profile = profile
        self.emit = emit
        self.session = SessionManager(self.data_dir / AUTH_FILE)
        self.preferences = PreferencesManager(self.data_dir / AUTH_PREFERENCES_FILE)
        self.settings = SettingsManager(self.data_dir / SETTINGS_FILE)

    @classmethod
    def from_environment(cls, emit: Optional[Emitter] = None, base_dir: Optional[Path] = None) -> "StateController":
        profile = current_profile()
        data_dir = resolve_data_dir(base_dir, profile)
        if profile:
            logger.info("Using profile %s (data directory %s)", profile, data_dir)
        return cls(data_dir, emit=emit, profile=profile)

    def _broadcast(self, event: str, payload: Any) -> None:
        if self.emit is None:
            return
        try:
            self.emit(event, payload)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to emit %s: %s", event, exc)

    def get_profile(self) -> Optional[str]:
        return self.profile

    # Session

    def get_user(self) -> Optional[SessionUser]:
        return self.session.get_user()

    def get_token(self) -> Optional[str]:
        return self.session.get_token()

    def get_refresh_token(self) -> Optional[str]:
        return self.session.get_refresh_token()

    def is_authenticated(self) -> bool:
        return self.session.is_authenticated()

    def set_auth(self, user: Union[SessionUser, Dict[str, Any]], token: str, refresh_token: str) -> None:
        user = _coerce(SessionUser, user)
        self.session.set_auth(user, token, refresh_token)
        self._broadcast(AUTH_CHANGED, to_payload(user, exclude_none=True))

    def update_user(self, user_updates: Union[SessionUser, Dict[str, Any]]) -> None:
        user = _coerce(SessionUser, user_updates)
        self.session.update_user(user)
        self._broadcast(AUTH_CHANGED, to_payload(user, exclude_none=True))

    def clear_auth(self) -> None:
        self.session.clear_auth()
        self._broadcast(AUTH_CLEARED, None)

    # Remembered credentials

    def get_auth_preferences(self) -> CredentialPreferences:
        return self.preferences.get_preferences()

    def save_auth_preferences(
        self, preferences: Union[CredentialPreferences, Dict[str, Any]], password: Optional[str] = None
    ) -> None:
        self.preferences.save_preferences(_coerce(CredentialPreferences, preferences), password)

    def clear_auth_preferences(self) -> None:
        self.preferences.clear_preferences()

    def get_remembered_credentials(self) -> Tuple[Optional[str], Optional[str]]:
        """Return the remembered ``(email, password)``.

        A blob that cannot be decrypted is reported as
        :class:`CredentialRestoreError` carrying the email, so the sign-in
        form can still be prefilled while the user re-enters the password.
        """
        try:
            return self.preferences.get_remembered_credentials()
        except (AuthenticationError, FormatError, EncodingError) as exc:
            logger.warning("Saved password could not be restored: %s", exc)
            email = self.preferences.get_preferences().remembered_email
            raise CredentialRestoreError(email=email) from exc

    # Settings

    def get_settings(self) -> SettingsRecord:
        return self.settings.get_settings()

    def update_notification_settings(self, notifications: Union[NotificationSettings, Dict[str, Any]]) -> None:
        notifications = _coerce(NotificationSettings, notifications)
        self.settings.update_notification_settings(notifications)
        self._broadcast(SETTINGS_CHANGED, to_payload(notifications))

    def update_startup_settings(self, startup: Union[StartupSettings, Dict[str, Any]]) -> None:
        startup = _coerce(StartupSettings, startup)
        self.settings.update_startup_settings(startup)
        self._broadcast(SETTINGS_CHANGED, to_payload(startup))

    def update_file_settings(self, files: Union[FileSettings, Dict[str, Any]]) -> None:
        files = _coerce(FileSettings, files)
        self.settings.update_file_settings(files)
        self._broadcast(SETTINGS_CHANGED, to_payload(files))

    def reset_settings(self) -> None:
        settings = self.settings.reset_settings()
        self._broadcast(SETTINGS_RESET, to_payload(settings))


__all__ = ["StateController", "AUTH_CHANGED", "AUTH_CLEARED", "SETTINGS_CHANGED", "SETTINGS_RESET"]
