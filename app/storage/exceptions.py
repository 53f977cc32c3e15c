from app.exceptions import BackendError, DownloadError


class StorageError(BackendError):
    """Raised when the blob store rejects or fails a request."""


class ObjectDownloadError(DownloadError):
    """Raised when an object's bytes cannot be fetched."""
