from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from simstore.core.config import AppSettings, settings as default_settings


def configure_logging(app_settings: AppSettings | None = None) -> None:
    """Configure process-wide logging handlers once."""
    app_settings = app_settings or default_settings
    root_logger = logging.getLogger()
    if getattr(root_logger, "_simstore_configured", False):
        return

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        "%Y-%m-%d %H:%M:%S",
    )

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    if app_settings.LOG_TO_FILE:
        log_file = Path(app_settings.LOG_FILE_PATH)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=log_file,
            maxBytes=app_settings.LOG_MAX_BYTES,
            backupCount=app_settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.setLevel(app_settings.LOG_LEVEL)
    setattr(root_logger, "_simstore_configured", True)
