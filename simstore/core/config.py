from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from simstore.domain.upload import UploadConfig


def _resolve_path(value: str, fallback: str) -> str:
    raw = (value or "").strip() or fallback
    path = Path(raw)
    if not path.is_absolute():
        path = (Path.cwd() / path).resolve()
    return str(path)


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    LOG_DIR: str = "logs"
    LOG_FILE_PATH: str = ""
    LOG_MAX_BYTES: int = 10 * 1024 * 1024
    LOG_BACKUP_COUNT: int = 5

    # Storage
    STORAGE_BACKEND: str = "memory"
    STORAGE_ROOT: str = "storage"
    STORAGE_INSTANCE_ID: str = "default"

    # Simulated uploads
    UPLOAD_SLOW_MODE: bool = False
    UPLOAD_CHUNK_DELAY_MS: int = 100
    UPLOAD_CHUNK_SIZE_BYTES: int = 1024

    @model_validator(mode="after")
    def normalize_and_validate(self) -> "AppSettings":
        self.LOG_LEVEL = (self.LOG_LEVEL or "INFO").upper()
        self.LOG_DIR = _resolve_path(self.LOG_DIR, "logs")
        self.LOG_FILE_PATH = _resolve_path(self.LOG_FILE_PATH, str(Path(self.LOG_DIR) / "simstore.log"))
        self.STORAGE_BACKEND = (self.STORAGE_BACKEND or "memory").strip().lower()
        self.STORAGE_ROOT = _resolve_path(self.STORAGE_ROOT, "storage")
        self.STORAGE_INSTANCE_ID = (self.STORAGE_INSTANCE_ID or "").strip() or "default"

        if self.STORAGE_BACKEND not in {"memory", "file"}:
            raise RuntimeError("STORAGE_BACKEND must be 'memory' or 'file'.")
        if self.UPLOAD_CHUNK_SIZE_BYTES <= 0:
            raise RuntimeError("UPLOAD_CHUNK_SIZE_BYTES must be positive.")
        if self.UPLOAD_CHUNK_DELAY_MS < 0:
            raise RuntimeError("UPLOAD_CHUNK_DELAY_MS must not be negative.")
        return self

    def upload_config(self) -> UploadConfig:
        return UploadConfig(
            slow_mode=self.UPLOAD_SLOW_MODE,
            chunk_delay=self.UPLOAD_CHUNK_DELAY_MS / 1000,
            chunk_size=self.UPLOAD_CHUNK_SIZE_BYTES,
        )


settings = AppSettings()
