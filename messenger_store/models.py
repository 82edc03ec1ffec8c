"""Records persisted by the local state store."""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model whose JSON keys are camelCase, as the desktop UI reads them."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SessionUser(CamelModel):
    id: str
    email: str
    username: str
    display_name: str
    personal_message: Optional[str] = None
    display_picture_url: Optional[str] = None
    presence_status: Optional[str] = None


class SessionRecord(BaseModel):
    """Signed-in user plus access and refresh tokens."""

    user: SessionUser
    token: str
    refresh_token: str


class CredentialPreferences(CamelModel):
    remember_me: bool = False
    remember_password: bool = False
    sign_in_automatically: bool = True
    remembered_email: Optional[str] = None
    # base64(nonce || ciphertext || tag); only set while remember_password is true
    encrypted_password: Optional[str] = None


class NotificationSettings(CamelModel):
    enabled: bool = True
    sound_enabled: bool = True
    sound_volume: int = Field(default=80, ge=0, le=100)
    desktop_alerts: bool = True


class StartupSettings(CamelModel):
    auto_launch: bool = False
    start_minimized: bool = False


class FileSettings(CamelModel):
    download_location: str = ""
    # user ids whose file transfers are accepted without prompting
    auto_accept_from: List[str] = Field(default_factory=list)


class SettingsRecord(CamelModel):
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    startup: StartupSettings = Field(default_factory=StartupSettings)
    files: FileSettings = Field(default_factory=FileSettings)


def to_payload(model: Optional[BaseModel], exclude_none: bool = False) -> Optional[dict]:
    """Dump a record with the same keys it has on disk."""
    if model is None:
        return None
    return model.model_dump(mode="json", by_alias=True, exclude_none=exclude_none)
