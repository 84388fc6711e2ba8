from http import HTTPStatus

from simstore.exceptions.exceptions import (
    DomainError,
    NotFoundError,
    UploadCancelledError,
    ValidationError,
)
from simstore.schemas.http import MockResponse, plain_text_response

_STATUS_BY_ERROR: tuple[tuple[type[DomainError], HTTPStatus], ...] = (
    (NotFoundError, HTTPStatus.NOT_FOUND),
    (ValidationError, HTTPStatus.UNPROCESSABLE_ENTITY),
    (UploadCancelledError, HTTPStatus.CONFLICT),
)


def error_response(exc: DomainError) -> MockResponse:
    """Render a domain error as a mock HTTP response with the status phrase as body."""
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return plain_text_response(status)
    return plain_text_response(HTTPStatus.BAD_REQUEST)


def not_found_response() -> MockResponse:
    return error_response(NotFoundError())
