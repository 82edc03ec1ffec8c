"""Application settings persistence."""
from pathlib import Path

from .models import FileSettings, NotificationSettings, SettingsRecord, StartupSettings
from .storage import RecordStore


class SettingsManager:
    def __init__(self, storage_path: Path):
        self.store: RecordStore[SettingsRecord] = RecordStore(
            storage_path, SettingsRecord, default=SettingsRecord, name="settings"
        )

    def get_settings(self) -> SettingsRecord:
        return self.store.get()

    def update_notification_settings(self, updates: NotificationSettings) -> SettingsRecord:
        return self._update_section("notifications", updates)

    def update_startup_settings(self, updates: StartupSettings) -> SettingsRecord:
        return self._update_section("startup", updates)

    def update_file_settings(self, updates: FileSettings) -> SettingsRecord:
        return self._update_section("files", updates)

    def reset_settings(self) -> SettingsRecord:
        self.store.reset()
        return self.store.get()

    def _update_section(self, section: str, updates) -> SettingsRecord:
        def apply(settings: SettingsRecord) -> SettingsRecord:
            setattr(settings, section, updates.model_copy(deep=True))
            return settings

        return self.store.update(apply)
