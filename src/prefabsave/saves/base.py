"""Base class for snapshot sinks."""

from __future__ import annotations

from abc import ABC, abstractmethod


class SnapshotSink(ABC):
    """Abstract storage for serialized snapshot containers.

    A sink maps opaque keys to byte blobs. Each write replaces the whole blob
    for its key; readers never observe a partially written blob.

    Example:
        class RedisSnapshotSink(SnapshotSink):
            def write(self, key: str, data: bytes) -> None:
                self.client.set(f"saves:{key}", data)

            def read(self, key: str) -> bytes | None:
                return self.client.get(f"saves:{key}")
            ...
    """

    @abstractmethod
    def write(self, key: str, data: bytes) -> None:
        """Store data under a key, replacing any previous data atomically."""

    @abstractmethod
    def read(self, key: str) -> bytes | None:
        """Return the data stored under a key, or None if there is none."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check whether data is stored under a key."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete the data stored under a key.

        Returns:
            True if something was deleted.
        """
