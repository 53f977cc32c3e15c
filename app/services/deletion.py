from app.database.repositories.document_repository import DocumentRepository
from app.database.repositories.extraction_repository import ExtractionRepository
from app.database.repositories.job_repository import JobRepository
from app.exceptions import AuthorizationError
from app.logging.logger import Log
from app.processor.exceptions import DocumentNotFoundError
from app.services.audit import AuditLogger
from app.services.sessions import session_fingerprint, session_matches
from app.storage.base import BaseStorageGateway


class DeletionService:
    """Owner-initiated removal of a document and everything derived from it."""

    def __init__(
        self,
        doc_repo: DocumentRepository,
        job_repo: JobRepository,
        extraction_repo: ExtractionRepository,
        storage: BaseStorageGateway,
        audit: AuditLogger,
    ) -> None:
        self._doc_repo = doc_repo
        self._job_repo = job_repo
        self._extraction_repo = extraction_repo
        self._storage = storage
        self._audit = audit

    def delete(self, document_id: str, session_id: str) -> None:
        """Delete blob, extractions, jobs, then the document row.

        Blob removal is best-effort; the rows are deleted even if it fails.

        Raises:
            DocumentNotFoundError: if the document does not exist.
            AuthorizationError: if session_id does not own the document.
        """
        document = self._doc_repo.find_by_id(document_id)
        if document is None:
            raise DocumentNotFoundError("Document not found")

        if not session_matches(document.session_id, session_id):
            Log.warning(f"Rejected delete of document {document_id}: session mismatch")
            raise AuthorizationError("Unauthorized: Invalid session")

        blob_deleted = False
        if document.storage_path:
            blob_deleted = self._storage.delete(document.storage_path)

        extractions = self._extraction_repo.delete_for_document(document_id)
        jobs = self._job_repo.delete_for_document(document_id)
        self._doc_repo.delete(document_id)
        Log.info(
            f"Deleted document {document_id} "
            f"({jobs} job(s), {extractions} extraction(s), blob removed: {blob_deleted})"
        )

        self._audit.record(
            "document.deleted",
            "document",
            document_id,
            user_identifier=session_fingerprint(session_id),
            metadata={
                "filename": document.filename,
                "storagePath": document.storage_path,
                "blobDeleted": blob_deleted,
                "jobsDeleted": jobs,
                "extractionsDeleted": extractions,
            },
        )
