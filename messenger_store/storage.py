"""Typed JSON records kept in memory and mirrored to disk."""
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Callable, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import FormatError, StateStoreError, StorageError

logger = logging.getLogger(__name__)

OWNER_ONLY = 0o600

RecordT = TypeVar("RecordT", bound=BaseModel)


def restrict_permissions(path: Path) -> None:
    """Limit ``path`` to owner read/write on platforms with POSIX modes."""
    if os.name != "posix":
        return
    try:
        os.chmod(path, OWNER_ONLY)
    except OSError as exc:
        raise StorageError(f"Failed to set permissions on {path}: {exc}") from exc


class RecordStore(Generic[RecordT]):
    """One record of type ``model`` guarded by a lock and saved as pretty JSON.

    The store never fails to construct: a missing file means first run and a
    corrupt one is logged and replaced by ``default()`` in memory. Mutations
    swap the in-memory record under the lock and write the file after the
    lock is released, so readers never wait on disk I/O. Concurrent saves
    are not serialized against each other; the last write wins.

    A record of ``None`` means "absent" and deletes the file on save.
    ``private`` stores reassert owner-only permissions after every write.
    """

    def __init__(
        self,
        path: Path,
        model: Type[RecordT],
        default: Callable[[], Optional[RecordT]],
        private: bool = False,
        exclude_none: bool = False,
        name: Optional[str] = None,
    ):
        self.path = Path(path)
        self.model = model
        self.name = name or self.path.stem
        self.private = private
        self._default = default
        self._exclude_none = exclude_none
        self._lock = threading.Lock()
        self._record: Optional[RecordT] = default()

        try:
            self.load()
        except StateStoreError as exc:
            logger.error("Failed to load %s from disk, keeping defaults: %s", self.name, exc)

    def load(self) -> bool:
        """Replace the in-memory record with the file's contents.

        Returns False when there is no file yet. On failure the current record
        is left untouched and the error is raised.
        """
        if not self.path.exists():
            return False
        try:
            contents = self.path.read_bytes()
        except OSError as exc:
            raise StorageError(f"Failed to read {self.name} file: {exc}") from exc
        try:
            record = self.model.model_validate_json(contents)
        except ValidationError as exc:
            raise FormatError(f"Failed to parse {self.name}: {exc}") from exc

        with self._lock:
            self._record = record
        return True

    def get(self) -> Optional[RecordT]:
        with self._lock:
            record = self._record
            return record.model_copy(deep=True) if record is not None else None

    def replace(self, record: Optional[RecordT]) -> None:
        with self._lock:
            self._record = record.model_copy(deep=True) if record is not None else None
        self.save()

    def update(self, func: Callable[[Optional[RecordT]], Optional[RecordT]]) -> Optional[RecordT]:
        """Apply ``func`` to a copy of the current record and persist the result.

        If ``func`` raises, nothing is changed or written.
        """
        with self._lock:
            current = self._record.model_copy(deep=True) if self._record is not None else None
            updated = func(current)
            self._record = updated
            result = updated.model_copy(deep=True) if updated is not None else None
        self.save()
        return result

    def reset(self) -> None:
        self.replace(self._default())

    def save(self) -> None:
        with self._lock:
            record = self._record
            try:
                data = (
                    None
                    if record is None
                    else record.model_dump_json(by_alias=True, indent=2, exclude_none=self._exclude_none)
                )
            except ValueError as exc:
                raise FormatError(f"Failed to serialize {self.name}: {exc}") from exc

        if data is None:
            self._remove()
            return

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._write_atomic(data)
        except OSError as exc:
            raise StorageError(f"Failed to write {self.name} file: {exc}") from exc

        if self.private:
            restrict_permissions(self.path)

    def _write_atomic(self, data: str) -> None:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _remove(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise StorageError(f"Failed to remove {self.name} file: {exc}") from exc
        logger.info("Removed %s file %s", self.name, self.path)
