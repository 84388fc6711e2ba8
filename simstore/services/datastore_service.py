from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from simstore.core.config import AppSettings, settings as default_settings
from simstore.domain.upload import UploadConfig
from simstore.exceptions.exceptions import NotFoundError
from simstore.infrastructure.storage.base import StorageBackend
from simstore.infrastructure.storage.local_fs import LocalFileSystemStorage
from simstore.infrastructure.storage.memory import InMemoryStorage
from simstore.models.enums import StorageBackendKind
from simstore.schemas.datastore_item import DatastoreItem
from simstore.services.mock_http import DatastoreRegistry, MockHttpClient
from simstore.services.upload_lifecycle import ChunkScheduler, CompletionCallback, UploadLifecycle

logger = logging.getLogger(__name__)

MEMORY_PROVIDER_TYPE = "in_memory"
FILE_PROVIDER_TYPE = "file_datastore"


class DatastoreService:
    """Public entry point: uploads go through an UploadLifecycle, reads go straight to storage.

    ``provider_type`` and ``instance_key`` identify this instance to the mock
    HTTP client (``/<provider_type>/<instance_key>/<path>``).
    """

    def __init__(
        self,
        storage: StorageBackend,
        *,
        provider_id: str,
        provider_type: str,
        instance_key: str,
        upload_config: UploadConfig | None = None,
        scheduler: ChunkScheduler | None = None,
    ):
        self.storage = storage
        self.provider_id = provider_id
        self.provider_type = provider_type
        self.instance_key = instance_key
        self.upload_config = upload_config or UploadConfig()
        self.upload_config.validate()
        self.scheduler = scheduler

    def put_data(
        self,
        path: str,
        data: bytes,
        *,
        content_type: str | None = None,
        content_encoding: str | None = None,
        content_language: str | None = None,
        cache_control: str | None = None,
        on_complete: CompletionCallback | None = None,
    ) -> UploadLifecycle:
        """Start an upload and return its handle without waiting for completion.

        Must be called from a running asyncio event loop.
        """
        return UploadLifecycle(
            path,
            data,
            storage=self.storage,
            provider_id=self.provider_id,
            config=self.upload_config,
            content_type=content_type,
            content_encoding=content_encoding,
            content_language=content_language,
            cache_control=cache_control,
            on_complete=on_complete,
            scheduler=self.scheduler,
        )

    def get(self, path: str) -> DatastoreItem:
        item = self.storage.get_item(path)
        if item is None:
            raise NotFoundError(f"Item not found at path: {path}")
        return item

    def exists(self, path: str) -> bool:
        return self.storage.exists(path)

    def delete(self, path: str) -> None:
        self.storage.delete(path)

    def get_download_link(self, path: str, expires: datetime | None = None) -> str:
        # Locators never expire; the argument is kept for API parity with real providers.
        return self.get(path).location_uri

    def clear(self) -> None:
        self.storage.clear()
        logger.info("[datastore] cleared provider_id=%s", self.provider_id)

    def list_paths(self) -> list[str]:
        return self.storage.list_paths()

    def get_raw_data(self, path: str) -> bytes | None:
        return self.storage.get_raw_data(path)

    def get_datastore_item(self, path: str) -> DatastoreItem | None:
        return self.storage.get_item(path)

    def http_client(self) -> MockHttpClient:
        registry = DatastoreRegistry()
        registry.register(self)
        return MockHttpClient(registry)


def build_memory_datastore(
    instance_id: str = "default",
    *,
    upload_config: UploadConfig | None = None,
    scheduler: ChunkScheduler | None = None,
) -> DatastoreService:
    return DatastoreService(
        InMemoryStorage(),
        provider_id=f"{MEMORY_PROVIDER_TYPE}_{instance_id}",
        provider_type=MEMORY_PROVIDER_TYPE,
        instance_key=instance_id,
        upload_config=upload_config,
        scheduler=scheduler,
    )


def build_file_datastore(
    base_path: str | Path,
    *,
    upload_config: UploadConfig | None = None,
    scheduler: ChunkScheduler | None = None,
) -> DatastoreService:
    return DatastoreService(
        LocalFileSystemStorage(Path(base_path)),
        provider_id=FILE_PROVIDER_TYPE,
        provider_type=FILE_PROVIDER_TYPE,
        instance_key=str(base_path),
        upload_config=upload_config,
        scheduler=scheduler,
    )


def build_datastore(app_settings: AppSettings | None = None) -> DatastoreService:
    app_settings = app_settings or default_settings
    upload_config = app_settings.upload_config()
    if app_settings.STORAGE_BACKEND == StorageBackendKind.MEMORY.value:
        return build_memory_datastore(app_settings.STORAGE_INSTANCE_ID, upload_config=upload_config)
    if app_settings.STORAGE_BACKEND == StorageBackendKind.FILE.value:
        return build_file_datastore(app_settings.STORAGE_ROOT, upload_config=upload_config)
    raise RuntimeError(f"Unsupported STORAGE_BACKEND: {app_settings.STORAGE_BACKEND}")
