"""Local file storage backend: one file per key inside a directory."""

import logging
import os
import tempfile
from pathlib import Path
from urllib.parse import quote

from .base import KeyValueStorage, StorageError

logger = logging.getLogger(__name__)


class FileStorage(KeyValueStorage):
    """Stores each key as a UTF-8 file.

    Writes go to a temporary file in the same directory which is then renamed
    over the target, so a failed write never leaves a half-written value.
    """

    SUFFIX = ".json"

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        """Map a key to its file path (keys are percent-encoded)."""
        return self.directory / f"{quote(key, safe='')}{self.SUFFIX}"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=self.SUFFIX)
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp_name, path)
        except OSError as e:
            try:
                os.unlink(tmp_name)
            except OSError:
                logger.warning(f"Could not remove temporary file {tmp_name}")
            raise StorageError(f"Failed to write {path}: {e}") from e

    def remove(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Failed to remove {path}: {e}") from e
