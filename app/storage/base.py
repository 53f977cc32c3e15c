from abc import ABC, abstractmethod

from app.storage.models import UploadHandle


class BaseStorageGateway(ABC):
    """Contract for blob store adapters. Implementations hold no per-object state."""

    @abstractmethod
    def issue_upload_handle(self, path: str) -> UploadHandle:
        """Issue a time-limited signed PUT URL that cannot overwrite an existing object.

        Raises:
            StorageError: if the blob store refuses to sign.
        """

    @abstractmethod
    def download(self, path: str) -> bytes:
        """Fetch an object's bytes through a time-limited signed GET URL.

        Raises:
            DownloadError: on non-2xx responses or network failure.
        """

    @abstractmethod
    def delete(self, path: str) -> bool:
        """Best-effort removal. Returns False (and logs) on failure, never raises."""
