
class DomainError(Exception):
    """Base exception for all datastore errors.
    Every error raised by the storage, upload and mock HTTP layers derives from
    this class so callers can handle them with a single except clause.
    """
    def __init__(self, message: str | None = None):
        """Initialize domain error with message.
        Args:
            message: Error message describing what went wrong.
        """
        super().__init__(message or "Domain error")


class NotFoundError(DomainError):
    """Exception raised when no item is stored at the requested path."""
    pass

class ValidationError(DomainError):
    """Exception raised when configuration or input fails validation rules."""
    pass


class UploadCancelledError(DomainError):
    """Completion result of an upload that was cancelled before it committed."""

    def __init__(self, path: str, upload_id: str):
        super().__init__(f"Upload cancelled: path={path} upload_id={upload_id}")
        self.path = path
        self.upload_id = upload_id


class RecordParseError(DomainError):
    """Exception raised when a persisted record cannot be decoded."""

    def __init__(self, location: str, reason: str | None = None):
        super().__init__(f"Unreadable record at {location}: {reason or 'unknown error'}")
        self.location = location
