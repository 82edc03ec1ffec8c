"""Local data directory and file layout."""
import os
from pathlib import Path
from typing import Optional

APP_NAME = "messenger-store"

DATA_DIR_ENV = "MESSENGER_STORE_DATA_DIR"
PROFILE_ENV = "MESSENGER_STORE_PROFILE"

AUTH_FILE = "auth.json"
AUTH_PREFERENCES_FILE = "auth_preferences.json"
SETTINGS_FILE = "settings.json"
ENCRYPTION_KEY_FILE = ".encryption_key"
LOG_FILE = "messenger_store.log"


def default_data_dir() -> Path:
    """Return the application data directory.

    ``$MESSENGER_STORE_DATA_DIR`` wins; otherwise the XDG data home is used,
    falling back to ``~/.local/share/messenger-store``.
    """
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()
    data_home = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(data_home) / APP_NAME


def current_profile() -> Optional[str]:
    profile = os.environ.get(PROFILE_ENV, "").strip()
    return profile or None


def resolve_data_dir(base_dir: Optional[Path] = None, profile: Optional[str] = None) -> Path:
    """Return the directory holding every state file for ``profile``.

    Profiles let several instances run side by side, each under
    ``<base>/profiles/<name>``.
    """
    base = Path(base_dir) if base_dir is not None else default_data_dir()
    if profile:
        separators = {"/", os.sep} | ({os.altsep} if os.altsep else set())
        if profile in (".", "..") or any(sep in profile for sep in separators):
            raise ValueError(f"Invalid profile name: {profile!r}")
        return base / "profiles" / profile
    return base
