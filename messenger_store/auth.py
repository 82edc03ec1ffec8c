"""Signed-in session persistence."""
import logging
from pathlib import Path
from typing import Optional

from .errors import StateError
from .models import SessionRecord, SessionUser
from .storage import RecordStore

logger = logging.getLogger(__name__)


class SessionManager:
    """Holds the authenticated user and tokens; signing out deletes the file."""

    def __init__(self, storage_path: Path):
        self.store: RecordStore[SessionRecord] = RecordStore(
            storage_path,
            SessionRecord,
            default=lambda: None,
            private=True,
            exclude_none=True,
            name="auth data",
        )

    def get_session(self) -> Optional[SessionRecord]:
        return self.store.get()

    def get_user(self) -> Optional[SessionUser]:
        session = self.store.get()
        return session.user if session else None

    def get_token(self) -> Optional[str]:
        session = self.store.get()
        return session.token if session else None

    def get_refresh_token(self) -> Optional[str]:
        session = self.store.get()
        return session.refresh_token if session else None

    def is_authenticated(self) -> bool:
        return self.store.get() is not None

    def set_auth(self, user: SessionUser, token: str, refresh_token: str) -> None:
        self.store.replace(SessionRecord(user=user, token=token, refresh_token=refresh_token))
        logger.info("Stored session for user %s", user.id)

    def update_user(self, user: SessionUser) -> None:
        """Replace the signed-in user's profile, keeping the tokens."""

        def apply(session: Optional[SessionRecord]) -> SessionRecord:
            if session is None:
                raise StateError("No user is currently authenticated")
            session.user = user.model_copy(deep=True)
            return session

        self.store.update(apply)

    def clear_auth(self) -> None:
        self.store.replace(None)
        logger.info("Cleared session")
