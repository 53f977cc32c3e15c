"""Upload-handle issuance: create the document row, then sign its upload URL."""

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import PurePosixPath

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from app.config.settings import Settings
from app.database.repositories.document_repository import DocumentRepository
from app.exceptions import ValidationError
from app.logging.logger import Log
from app.services.audit import AuditLogger
from app.services.sessions import new_session_id, session_fingerprint
from app.storage.base import BaseStorageGateway

DEFAULT_EXTENSION = "bin"
_EXTENSION_RE = re.compile(r"[^a-z0-9]")


class UploadRequest(BaseModel):
    filename: str = Field(min_length=1)
    mime: str = Field(min_length=1)
    size: int = Field(gt=0)


@dataclass(frozen=True)
class UploadTicket:
    document_id: str
    session_id: str
    upload_url: str
    token: str
    path: str
    expires_at: datetime


def build_storage_path(document_id: str, filename: str) -> str:
    """Blob path partitioned by document id, e.g. anon/<id>/original.pdf."""
    extension = _EXTENSION_RE.sub("", PurePosixPath(filename).suffix.lower())[:10]
    return f"anon/{document_id}/original.{extension or DEFAULT_EXTENSION}"


class UploadService:
    """Issues upload handles as a two-step saga.

    Step 1 inserts the document row and records its storage path. Step 2
    asks the blob store for a signed upload URL. If step 2 (or the path
    update) fails, the compensation deletes the document row. The
    compensation itself is best-effort: if it fails too, the row is left
    orphaned and logged for the expiry reaper.
    """

    def __init__(
        self,
        doc_repo: DocumentRepository,
        storage: BaseStorageGateway,
        audit: AuditLogger,
        settings: Settings,
    ) -> None:
        self._doc_repo = doc_repo
        self._storage = storage
        self._audit = audit
        self._settings = settings

    def issue(self, filename: str, mime: str, size: int) -> UploadTicket:
        request = self.validate(filename, mime, size)
        session_id = new_session_id()

        document = self._doc_repo.create(
            session_id=session_id,
            filename=request.filename,
            mime=request.mime,
            size_bytes=request.size,
            ttl_days=self._settings.document_ttl_days,
        )
        Log.info(f"Created document {document.id} for {request.filename!r}")

        path = build_storage_path(document.id, request.filename)
        try:
            self._doc_repo.set_storage_path(document.id, path)
            handle = self._storage.issue_upload_handle(path)
        except Exception as exc:
            self._compensate(document.id, exc)
            raise

        self._audit.record(
            "upload_issued",
            "document",
            document.id,
            user_identifier=session_fingerprint(session_id),
            metadata={"filename": request.filename, "mime": request.mime, "size": request.size},
        )
        return UploadTicket(
            document_id=document.id,
            session_id=session_id,
            upload_url=handle.upload_url,
            token=handle.token,
            path=handle.path,
            expires_at=handle.expires_at,
        )

    def validate(self, filename: str, mime: str, size: int) -> UploadRequest:
        """Check shape and bounds before anything touches the store.

        Raises:
            ValidationError: with a per-field details list.
        """
        try:
            request = UploadRequest(filename=filename.strip(), mime=mime.strip().lower(), size=size)
        except PydanticValidationError as exc:
            raise ValidationError(
                "Invalid upload request",
                details=exc.errors(include_url=False, include_context=False, include_input=False),
            ) from exc

        if len(request.filename) > self._settings.filename_max_length:
            raise ValidationError(
                "Invalid upload request",
                details=[{
                    "loc": ["filename"],
                    "msg": f"Filename longer than {self._settings.filename_max_length} characters",
                }],
            )
        if request.size > self._settings.upload_max_bytes:
            raise ValidationError(
                "Invalid upload request",
                details=[{
                    "loc": ["size"],
                    "msg": f"File larger than {self._settings.upload_max_bytes} bytes",
                }],
            )
        if request.mime not in self._settings.allowed_mime_types:
            raise ValidationError(
                "Invalid upload request",
                details=[{"loc": ["mime"], "msg": f"Unsupported file type {request.mime}"}],
            )
        return request

    def _compensate(self, document_id: str, cause: Exception) -> None:
        Log.warning(f"Upload handle for document {document_id} failed ({cause}); deleting row")
        try:
            self._doc_repo.delete(document_id)
        except Exception as exc:
            Log.error(
                f"Compensation failed, document {document_id} is orphaned until expiry: {exc}"
            )
            return
        self._audit.record(
            "upload_compensated",
            "document",
            document_id,
            metadata={"reason": str(cause)},
        )
