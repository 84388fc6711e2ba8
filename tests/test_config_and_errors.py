import logging
from http import HTTPStatus

import pytest

from simstore.core.config import AppSettings
from simstore.core.logging_setup import configure_logging
from simstore.domain.upload import UploadConfig
from simstore.exceptions.exceptions import (
    DomainError,
    NotFoundError,
    RecordParseError,
    UploadCancelledError,
    ValidationError,
)
from simstore.exceptions.handlers import error_response, not_found_response


def test_settings_defaults(monkeypatch):
    for name in ("STORAGE_BACKEND", "UPLOAD_SLOW_MODE", "UPLOAD_CHUNK_DELAY_MS", "UPLOAD_CHUNK_SIZE_BYTES"):
        monkeypatch.delenv(name, raising=False)

    settings = AppSettings()

    assert settings.STORAGE_BACKEND == "memory"
    assert settings.upload_config() == UploadConfig(slow_mode=False, chunk_delay=0.1, chunk_size=1024)


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("STORAGE_BACKEND", " File ")
    monkeypatch.setenv("UPLOAD_SLOW_MODE", "true")
    monkeypatch.setenv("UPLOAD_CHUNK_SIZE_BYTES", "100")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = AppSettings()

    assert settings.STORAGE_BACKEND == "file"
    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.upload_config().slow_mode is True
    assert settings.upload_config().chunk_size == 100


@pytest.mark.parametrize(
    "overrides",
    [
        {"STORAGE_BACKEND": "s3"},
        {"UPLOAD_CHUNK_SIZE_BYTES": 0},
        {"UPLOAD_CHUNK_DELAY_MS": -1},
    ],
)
def test_settings_reject_invalid_values(overrides):
    with pytest.raises(RuntimeError):
        AppSettings(**overrides)


def test_configure_logging_is_idempotent(tmp_path):
    root_logger = logging.getLogger()
    saved_handlers = list(root_logger.handlers)
    saved_level = root_logger.level
    try:
        settings = AppSettings(LOG_TO_FILE=True, LOG_FILE_PATH=str(tmp_path / "logs" / "app.log"), LOG_LEVEL="warning")
        configure_logging(settings)
        added = [handler for handler in root_logger.handlers if handler not in saved_handlers]
        configure_logging(settings)

        assert len(added) == 2
        assert len([h for h in root_logger.handlers if h not in saved_handlers]) == 2
        assert root_logger.level == logging.WARNING
        assert (tmp_path / "logs").is_dir()
    finally:
        for handler in root_logger.handlers:
            if handler not in saved_handlers:
                handler.close()
        root_logger.handlers = saved_handlers
        root_logger.setLevel(saved_level)
        if hasattr(root_logger, "_simstore_configured"):
            delattr(root_logger, "_simstore_configured")


def test_error_hierarchy():
    cancelled = UploadCancelledError("a.txt", "up-1")
    parse_failure = RecordParseError("/tmp/a.json", "bad json")

    assert isinstance(cancelled, DomainError)
    assert cancelled.path == "a.txt"
    assert "up-1" in str(cancelled)
    assert isinstance(parse_failure, DomainError)
    assert "bad json" in str(parse_failure)
    assert str(DomainError()) == "Domain error"


@pytest.mark.parametrize(
    ("exc", "status", "body"),
    [
        (NotFoundError("gone"), 404, b"Not Found"),
        (ValidationError("bad"), 422, HTTPStatus.UNPROCESSABLE_ENTITY.phrase.encode()),
        (UploadCancelledError("a", "b"), 409, b"Conflict"),
        (DomainError("other"), 400, b"Bad Request"),
    ],
)
def test_error_responses(exc, status, body):
    response = error_response(exc)

    assert response.status_code == status
    assert response.body == body
    assert response.header("content-length") == str(len(body))


def test_not_found_response_shape():
    response = not_found_response()

    assert (response.status_code, response.reason, response.text) == (404, "Not Found", "Not Found")
    assert response.headers == {"content-type": "text/plain", "content-length": "9"}
