from __future__ import annotations

from simstore.infrastructure.storage.base import StorageBackend
from simstore.schemas.datastore_item import DatastoreItem


class InMemoryStorage(StorageBackend):
    """Process-local storage backend holding records and payloads in dicts."""

    def __init__(self) -> None:
        self._items: dict[str, DatastoreItem] = {}
        self._raw_data: dict[str, bytes] = {}

    def store_item(self, path: str, item: DatastoreItem) -> None:
        self._items[path] = item

    def store_raw_data(self, path: str, data: bytes) -> None:
        self._raw_data[path] = bytes(data)

    def get_item(self, path: str) -> DatastoreItem | None:
        return self._items.get(path)

    def get_raw_data(self, path: str) -> bytes | None:
        return self._raw_data.get(path)

    def exists(self, path: str) -> bool:
        return path in self._items and path in self._raw_data

    def delete(self, path: str) -> None:
        self._items.pop(path, None)
        self._raw_data.pop(path, None)

    def clear(self) -> None:
        self._items.clear()
        self._raw_data.clear()

    def list_paths(self) -> list[str]:
        return list(self._items.keys())
