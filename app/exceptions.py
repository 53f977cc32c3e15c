"""Error taxonomy shared by the request path and the job path."""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    AUTHORIZATION = "authorization"
    BACKEND = "backend"
    EXTRACTION = "extraction"
    DOWNLOAD = "download"
    TIMEOUT = "timeout"
    INTERNAL = "internal"


class AppError(Exception):
    """Base exception for all application errors."""

    kind: ErrorKind = ErrorKind.INTERNAL
    status_code: int = 500

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.details = details


class ValidationError(AppError):
    """Raised when caller input has the wrong shape or size."""

    kind = ErrorKind.VALIDATION
    status_code = 400


class NotFoundError(AppError):
    """Raised when a document, job or extraction does not exist."""

    kind = ErrorKind.NOT_FOUND
    status_code = 404


class AuthorizationError(AppError):
    """Raised when a session identifier does not own the document."""

    kind = ErrorKind.AUTHORIZATION
    status_code = 403


class BackendError(AppError):
    """Raised when the datastore or the blob store fails."""

    kind = ErrorKind.BACKEND
    status_code = 500


class ExtractionError(AppError):
    """Raised when the extraction service output is unusable."""

    kind = ErrorKind.EXTRACTION
    status_code = 502


class DownloadError(AppError):
    """Raised when document bytes cannot be fetched from the blob store."""

    kind = ErrorKind.DOWNLOAD
    status_code = 502


def error_kind_of(exc: BaseException) -> ErrorKind:
    """Map any exception to its ErrorKind; unknown exceptions are internal."""
    if isinstance(exc, AppError):
        return exc.kind
    return ErrorKind.INTERNAL
