"""Snapshot sinks backed by files or memory."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from prefabsave.conf import settings
from prefabsave.saves.base import SnapshotSink

logger = logging.getLogger(__name__)


class FileSnapshotSink(SnapshotSink):
    """Stores each key as one file in a saves directory.

    Writes go to a temporary file in the same directory which then replaces
    the target, so a crash mid-write leaves the previous save intact.

    Attributes:
        saves_dir: Directory containing the snapshot files.
        extension: Suffix appended to each key.
    """

    def __init__(self, saves_dir: Path | None = None, extension: str | None = None) -> None:
        """Initialize the sink.

        Args:
            saves_dir: Directory for snapshot files. Defaults to settings.SAVES_DIR
                relative to the working directory.
            extension: File suffix. Defaults to settings.SAVE_FILE_EXTENSION.
        """
        self.saves_dir = saves_dir if saves_dir is not None else Path.cwd() / settings.SAVES_DIR
        self.extension = extension if extension is not None else settings.SAVE_FILE_EXTENSION

    def path_for(self, key: str) -> Path:
        """Return the file path used for a key.

        Raises:
            ValueError: If the key would escape the saves directory.
        """
        if not key or "/" in key or "\\" in key or key in (".", ".."):
            msg = f"Invalid save key '{key}'"
            raise ValueError(msg)
        return self.saves_dir / f"{key}{self.extension}"

    def write(self, key: str, data: bytes) -> None:
        """Atomically replace the file for a key."""
        path = self.path_for(key)
        self.saves_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.saves_dir, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            Path(tmp_name).replace(path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %d bytes to %s", len(data), path)

    def read(self, key: str) -> bytes | None:
        """Return the file contents for a key, or None if the file is missing."""
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def exists(self, key: str) -> bool:
        """Check whether the file for a key exists."""
        return self.path_for(key).is_file()

    def delete(self, key: str) -> bool:
        """Delete the file for a key."""
        path = self.path_for(key)
        if not path.exists():
            logger.warning("No save file to delete at %s", path)
            return False
        path.unlink()
        logger.info("Deleted save %s", path)
        return True


class MemorySnapshotSink(SnapshotSink):
    """Keeps snapshots in a dictionary. Useful for tests and in-process checkpoints."""

    def __init__(self) -> None:
        """Initialize an empty sink."""
        self.blobs: dict[str, bytes] = {}

    def write(self, key: str, data: bytes) -> None:
        """Store a copy of the data."""
        self.blobs[key] = bytes(data)

    def read(self, key: str) -> bytes | None:
        """Return the stored data, if any."""
        return self.blobs.get(key)

    def exists(self, key: str) -> bool:
        """Check whether data is stored under a key."""
        return key in self.blobs

    def delete(self, key: str) -> bool:
        """Delete the data stored under a key."""
        return self.blobs.pop(key, None) is not None
