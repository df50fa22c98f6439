"""
Local staging storage for uploaded CSV files.

A staged file belongs to exactly one request and must be deleted by that
request on every exit path.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

from db.repositories.errors import FileStorageError
from db.repositories.types import StagedFile

logger = logging.getLogger(__name__)


def _sanitize_file_name(file_name: str) -> str:
    safe_name = Path(file_name).name.strip()
    if not safe_name:
        raise FileStorageError("Invalid file name.")
    return safe_name


class StagingFileStorage:
    """
    Writes uploads under a local directory with a unique, timestamped name.
    """

    def __init__(self, root_dir: str | Path = "data/uploads") -> None:
        self._root_dir = Path(root_dir)

    @property
    def root_dir(self) -> Path:
        return self._root_dir

    def save(self, *, file_name: str, content: bytes) -> StagedFile:
        safe_file_name = _sanitize_file_name(file_name)
        stored_at = datetime.now(timezone.utc)

        # Client file name stays on StagedFile; the on-disk name is fixed length.
        target = self._root_dir / f"{int(stored_at.timestamp() * 1000)}-{uuid.uuid4().hex}.upload"
        tmp_path = target.with_suffix(f"{target.suffix}.tmp")
        try:
            self._root_dir.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("wb") as handle:
                handle.write(content)
            tmp_path.replace(target)
        except OSError as exc:
            raise FileStorageError("Failed to stage uploaded file.") from exc
        finally:
            if tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError:
                    pass

        return StagedFile(
            file_name=safe_file_name,
            path=target,
            size_bytes=len(content),
            stored_at=stored_at,
        )

    def delete(self, staged: StagedFile) -> None:
        if not staged.path.exists():
            return
        try:
            staged.path.unlink()
        except OSError as exc:
            raise FileStorageError("Failed to delete staged upload.") from exc

    def delete_quietly(self, staged: StagedFile) -> None:
        try:
            self.delete(staged)
        except FileStorageError:
            logger.exception("Could not remove staged upload path=%s", staged.path)
