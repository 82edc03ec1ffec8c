"""Shared pytest fixtures for the messenger store test suite.

The autouse fixture keeps every test away from the real data directory and
from any profile set in the developer's shell.
"""

import logging

import pytest

from messenger_store.config import DATA_DIR_ENV, PROFILE_ENV
from messenger_store.logging_config import LOGGER_NAME
from messenger_store.models import SessionUser


@pytest.fixture(autouse=True)
def _isolate_environment(tmp_path, monkeypatch):
    monkeypatch.setenv(DATA_DIR_ENV, str(tmp_path / "appdata"))
    monkeypatch.delenv(PROFILE_ENV, raising=False)
    monkeypatch.delenv("XDG_DATA_HOME", raising=False)


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Drop handlers added by configure_logging() so tests stay independent."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def data_dir(tmp_path):
    path = tmp_path / "profile"
    path.mkdir()
    return path


@pytest.fixture
def alice():
    return SessionUser(
        id="u-1",
        email="alice@example.com",
        username="alice",
        display_name="Alice",
        presence_status="online",
    )
