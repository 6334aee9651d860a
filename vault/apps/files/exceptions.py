"""Exceptions for files app.

Every error raised by the business logic derives from ``FilesError`` and
carries the HTTP status and the caller-safe message used at the API
boundary. Internal details (storage locations, backend errors) stay in
the exception chain and the logs, never in ``message``.
"""

from typing import ClassVar


class FilesError(Exception):
    """Base class for file storage errors."""

    status_code: ClassVar[int] = 500
    default_message: ClassVar[str] = 'Server error'

    def __init__(self, message: str | None = None) -> None:
        """Initialize FilesError.

        Args:
            message: Caller-safe description, defaults to class message.
        """
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(FilesError):
    """Raised for malformed or missing input."""

    status_code = 400
    default_message = 'Invalid request'


class PayloadTooLargeError(ValidationError):
    """Raised when an upload exceeds the configured size ceiling."""

    status_code = 413
    default_message = 'File too large'

    def __init__(self, size_bytes: int, max_bytes: int) -> None:
        """Initialize PayloadTooLargeError.

        Args:
            size_bytes: Size of the rejected payload.
            max_bytes: Configured upload ceiling.
        """
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes
        super().__init__(
            f'File too large: {size_bytes} bytes '
            f'(limit: {max_bytes} bytes)',
        )


class NotFoundError(FilesError):
    """Raised when a record is absent, not owned, or in the wrong state.

    The three causes are reported identically so that one owner cannot
    probe for the existence of another owner's files.
    """

    status_code = 404
    default_message = 'File not found'


class NotFoundOnStorageError(FilesError):
    """Raised when a record exists but its blob is gone."""

    status_code = 404
    default_message = 'File not found on storage'


class StorageError(FilesError):
    """Raised when the blob store fails to read, write or delete."""

    default_message = 'Storage error'


class UploadError(FilesError):
    """Raised when an upload could not be completed."""

    default_message = 'Server error during file upload'


class InternalError(FilesError):
    """Raised for any unexpected failure."""
