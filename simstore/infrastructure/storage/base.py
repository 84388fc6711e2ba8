from __future__ import annotations

from abc import ABC, abstractmethod

from simstore.schemas.datastore_item import DatastoreItem


class StorageBackend(ABC):
    """Abstraction for record + payload storage keyed by logical path."""

    @abstractmethod
    def store_item(self, path: str, item: DatastoreItem) -> None:
        """Insert or overwrite the record at path."""

    @abstractmethod
    def store_raw_data(self, path: str, data: bytes) -> None:
        """Insert or overwrite the raw payload at path."""

    @abstractmethod
    def get_item(self, path: str) -> DatastoreItem | None:
        """Return the record at path, or None if missing or unreadable."""

    @abstractmethod
    def get_raw_data(self, path: str) -> bytes | None:
        """Return the payload at path, or None if missing or unreadable."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Return True only when both record and payload are stored."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """Remove record and payload. Missing paths are ignored."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every record and payload."""

    @abstractmethod
    def list_paths(self) -> list[str]:
        """Return all stored logical paths, in no particular order."""

    def commit(self, path: str, item: DatastoreItem, data: bytes) -> None:
        """Store payload then record, so a visible record always has its payload."""
        self.store_raw_data(path, data)
        self.store_item(path, item)
