"""Status file persistence for scheduled collections."""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from .errors import StorageError
from .models import SCHEMA_VERSION, CollectionStatus


class StatusStore:
    """Manage the status file that remembers the last collection time.

    Concurrent invocations sharing one status file are not coordinated; when two
    runs race on the read-modify-write in ``record_collection_time`` the last
    writer wins.
    """

    def __init__(self, path: Path | str) -> None:
        """Bind the store to a status file and prepare its parent directory.

        Args:
            path: Location of the status file.

        Raises:
            StorageError: If the parent directory cannot be created.
        """
        self._path = Path(path).expanduser()
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(
                f"Unable to create status directory {self._path.parent}: {exc}"
            ) from exc

    @property
    def path(self) -> Path:
        """Return the status file location.

        Returns:
            Path: Path of the status file.
        """
        return self._path

    def read(self) -> CollectionStatus:
        """Load the persisted status record.

        Returns:
            CollectionStatus: Stored record, or an empty record if no file exists yet.

        Raises:
            StorageError: If the file cannot be read or does not hold a valid record.
        """
        if not self._path.exists():
            return CollectionStatus()

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise StorageError(f"Unable to read status file {self._path}: {exc}") from exc
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise StorageError(f"Invalid status data in {self._path}: {exc}") from exc

        if not isinstance(data, dict):
            raise StorageError(f"Status file {self._path} must contain a mapping.")
        version = data.get("schema_version")
        if version != SCHEMA_VERSION:
            raise StorageError(
                f"Unsupported status schema version {version!r} in {self._path} "
                f"(expected {SCHEMA_VERSION})."
            )

        try:
            return CollectionStatus.model_validate(data)
        except ValidationError as exc:
            raise StorageError(f"Invalid status data in {self._path}: {exc}") from exc

    @property
    def last_collection_time(self) -> datetime | None:
        """Return the stored last collection time, if any.

        Returns:
            datetime | None: Timestamp of the last collection.
        """
        return self.read().last_collection_time

    def record_collection_time(self, collected_at: datetime) -> CollectionStatus:
        """Persist ``collected_at`` as the last collection time.

        Args:
            collected_at: Time at which the collection happened.

        Returns:
            CollectionStatus: The record that was written.

        Raises:
            StorageError: If the current record cannot be loaded or the new one written.
        """
        status = self.read()
        status.last_collection_time = collected_at
        self._write(status)
        return status

    def _write(self, status: CollectionStatus) -> None:
        payload = json.dumps(status.model_dump(mode="json"), indent=2)
        directory = self._path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=directory, prefix=f".{self._path.name}.", suffix=".tmp"
            )
        except OSError as exc:
            raise StorageError(f"Unable to write status file {self._path}: {exc}") from exc

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self._path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise StorageError(f"Unable to write status file {self._path}: {exc}") from exc


__all__ = [
    "StatusStore",
    "CollectionStatus",
    "SCHEMA_VERSION",
    "StorageError",
]
