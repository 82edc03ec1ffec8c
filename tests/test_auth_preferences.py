# Tests for remember-me preferences
# Covers: the remember-password policy, encrypted-at-rest storage, credential
#         recovery and the failure paths around the cipher

import base64
import json
import os
import stat

import pytest

from messenger_store.auth_preferences import PreferencesManager
from messenger_store.errors import AuthenticationError, FormatError, StorageError
from messenger_store.models import CredentialPreferences


@pytest.fixture
def prefs_path(data_dir):
    return data_dir / "auth_preferences.json"


@pytest.fixture
def manager(prefs_path):
    return PreferencesManager(prefs_path)


def remembered(**overrides):
    values = dict(
        remember_me=True,
        remember_password=True,
        sign_in_automatically=False,
        remembered_email="alice@example.com",
    )
    values.update(overrides)
    return CredentialPreferences(**values)


def test_defaults(manager):
    prefs = manager.get_preferences()

    assert prefs.remember_me is False
    assert prefs.remember_password is False
    assert prefs.sign_in_automatically is True
    assert prefs.remembered_email is None
    assert prefs.encrypted_password is None
    assert manager.get_remembered_credentials() == (None, None)


def test_remember_then_forget_password(manager, prefs_path):
    manager.save_preferences(remembered(), password="Secr3t!")
    assert manager.get_remembered_credentials() == ("alice@example.com", "Secr3t!")

    manager.save_preferences(remembered(remember_password=False), password="Secr3t!")

    assert manager.get_remembered_credentials() == ("alice@example.com", None)
    assert PreferencesManager(prefs_path).get_preferences().encrypted_password is None


def test_credentials_survive_restart(manager, prefs_path):
    manager.save_preferences(remembered(), password="Secr3t!")

    assert PreferencesManager(prefs_path).get_remembered_credentials() == ("alice@example.com", "Secr3t!")


def test_plaintext_never_written(manager, prefs_path):
    manager.save_preferences(remembered(), password="Secr3t!")

    text = prefs_path.read_text(encoding="utf-8")
    assert "Secr3t!" not in text
    data = json.loads(text)
    assert data["rememberPassword"] is True
    assert len(base64.b64decode(data["encryptedPassword"])) > 12


@pytest.mark.parametrize("password", [None, "Secr3t!", ""])
def test_no_blob_when_password_not_remembered(manager, password):
    manager.save_preferences(remembered(), password="old-password")

    manager.save_preferences(remembered(remember_password=False), password=password)

    assert manager.get_preferences().encrypted_password is None


def test_stale_blob_dropped_when_no_password_supplied(manager):
    manager.save_preferences(remembered(), password="Secr3t!")

    manager.save_preferences(remembered())

    assert manager.get_remembered_credentials() == ("alice@example.com", None)


def test_blob_in_argument_is_ignored(manager):
    forged = remembered(remember_password=False, encrypted_password="Zm9yZ2Vk")

    manager.save_preferences(forged)

    assert manager.get_preferences().encrypted_password is None
    assert forged.encrypted_password == "Zm9yZ2Vk"


def test_key_file_sits_next_to_preferences(manager, data_dir):
    manager.save_preferences(remembered(), password="Secr3t!")

    key_path = data_dir / ".encryption_key"
    assert key_path.exists()
    assert len(key_path.read_bytes()) == 32


@pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits only")
def test_files_are_owner_only(manager, prefs_path, data_dir):
    manager.save_preferences(remembered(), password="Secr3t!")

    assert stat.S_IMODE(prefs_path.stat().st_mode) == 0o600
    assert stat.S_IMODE((data_dir / ".encryption_key").stat().st_mode) == 0o600


def test_clear_preferences(manager, prefs_path):
    manager.save_preferences(remembered(), password="Secr3t!")

    manager.clear_preferences()

    assert manager.get_preferences() == CredentialPreferences()
    assert PreferencesManager(prefs_path).get_remembered_credentials() == (None, None)


def test_tampered_blob_keeps_email(manager, prefs_path):
    manager.save_preferences(remembered(), password="Secr3t!")
    data = json.loads(prefs_path.read_text(encoding="utf-8"))
    raw = bytearray(base64.b64decode(data["encryptedPassword"]))
    raw[-1] ^= 0xFF
    data["encryptedPassword"] = base64.b64encode(bytes(raw)).decode()
    prefs_path.write_text(json.dumps(data), encoding="utf-8")

    reloaded = PreferencesManager(prefs_path)
    with pytest.raises(AuthenticationError):
        reloaded.get_remembered_credentials()
    assert reloaded.get_preferences().remembered_email == "alice@example.com"


def test_undersized_blob_is_format_error(manager):
    manager.store.replace(remembered(encrypted_password=base64.b64encode(b"tiny").decode()))

    with pytest.raises(FormatError):
        manager.get_remembered_credentials()


def test_lost_key_fails_authentication(manager, data_dir):
    manager.save_preferences(remembered(), password="Secr3t!")
    (data_dir / ".encryption_key").unlink()

    with pytest.raises(AuthenticationError):
        manager.get_remembered_credentials()


def test_encryption_failure_leaves_state_intact(manager, data_dir):
    manager.save_preferences(remembered(), password="Secr3t!")
    before = manager.get_preferences()
    (data_dir / ".encryption_key").write_bytes(b"short")

    with pytest.raises(StorageError):
        manager.save_preferences(remembered(remembered_email="bob@example.com"), password="other")

    assert manager.get_preferences() == before
