from __future__ import annotations

import logging
import uuid
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from simstore.exceptions.exceptions import RecordParseError
from simstore.infrastructure.storage.base import StorageBackend
from simstore.schemas.datastore_item import DatastoreItem, StoredRecord

logger = logging.getLogger(__name__)

RECORD_SUFFIX = ".json"
PAYLOAD_SUFFIX = ".dat"
_RESERVED_CHARS = ("/", "\\", ":", "?", "*", "<", ">", "|", '"')
_PLACEHOLDER = "_"


def sanitize_path(path: str) -> str:
    """Map a logical path to a single filesystem-safe file name."""
    safe = path
    for char in _RESERVED_CHARS:
        safe = safe.replace(char, _PLACEHOLDER)
    return safe


class LocalFileSystemStorage(StorageBackend):
    """Local FS storage backend with sibling record and payload namespaces."""

    def __init__(self, root: Path):
        self.root = Path(root)
        self.items_root = self.root / "items"
        self.data_root = self.root / "data"
        self.items_root.mkdir(parents=True, exist_ok=True)
        self.data_root.mkdir(parents=True, exist_ok=True)

    def _item_path(self, path: str) -> Path:
        return self.items_root / f"{sanitize_path(path)}{RECORD_SUFFIX}"

    def _data_path(self, path: str) -> Path:
        return self.data_root / f"{sanitize_path(path)}{PAYLOAD_SUFFIX}"

    @staticmethod
    def _write_atomic(target: Path, payload: bytes) -> None:
        temp = target.with_name(f"{target.name}.{uuid.uuid4().hex}.part")
        try:
            temp.write_bytes(payload)
            temp.replace(target)
        finally:
            temp.unlink(missing_ok=True)

    def _read_record(self, record_file: Path) -> StoredRecord:
        try:
            return StoredRecord.model_validate_json(record_file.read_bytes())
        except (OSError, PydanticValidationError) as exc:
            raise RecordParseError(str(record_file), str(exc)) from exc

    def store_item(self, path: str, item: DatastoreItem) -> None:
        record = StoredRecord(path=path, item=item)
        self._write_atomic(self._item_path(path), record.model_dump_json().encode("utf-8"))

    def store_raw_data(self, path: str, data: bytes) -> None:
        self._write_atomic(self._data_path(path), bytes(data))

    def _record_for(self, path: str) -> StoredRecord | None:
        """Read the record stored for `path`, or None.

        Distinct paths can share a sanitized file name, so a record written for
        another path counts as absent.
        """
        record_file = self._item_path(path)
        if not record_file.exists():
            return None
        try:
            record = self._read_record(record_file)
        except RecordParseError as exc:
            logger.warning("[storage] treating unreadable record as absent: %s", exc)
            return None
        if record.path != path:
            logger.debug("[storage] file name %s belongs to path=%s not path=%s", record_file.name, record.path, path)
            return None
        return record

    def _held_by_other_path(self, path: str) -> bool:
        try:
            return self._read_record(self._item_path(path)).path != path
        except RecordParseError:
            return False

    def get_item(self, path: str) -> DatastoreItem | None:
        record = self._record_for(path)
        return record.item if record is not None else None

    def get_raw_data(self, path: str) -> bytes | None:
        data_file = self._data_path(path)
        if not data_file.exists() or self._held_by_other_path(path):
            return None
        try:
            return data_file.read_bytes()
        except OSError as exc:
            logger.warning("[storage] failed to read payload path=%s: %s", path, exc)
            return None

    def exists(self, path: str) -> bool:
        return self._data_path(path).exists() and self._record_for(path) is not None

    def delete(self, path: str) -> None:
        if self._held_by_other_path(path):
            return
        self._item_path(path).unlink(missing_ok=True)
        self._data_path(path).unlink(missing_ok=True)

    def clear(self) -> None:
        for directory in (self.items_root, self.data_root):
            for entry in directory.iterdir():
                if entry.is_file():
                    entry.unlink(missing_ok=True)

    def list_paths(self) -> list[str]:
        paths: list[str] = []
        for record_file in self.items_root.glob(f"*{RECORD_SUFFIX}"):
            try:
                paths.append(self._read_record(record_file).path)
            except RecordParseError as exc:
                logger.warning("[storage] skipping unreadable record while listing: %s", exc)
        return paths
