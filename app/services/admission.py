from app.database.models import JobKind, JobRecord
from app.database.repositories.document_repository import DocumentRepository
from app.database.repositories.job_repository import JobRepository
from app.logging.logger import Log
from app.processor.exceptions import DocumentNotFoundError
from app.services.audit import AuditLogger


class AdmissionService:
    """Creates the parse job for a document, at most one active per document."""

    def __init__(
        self,
        doc_repo: DocumentRepository,
        job_repo: JobRepository,
        audit: AuditLogger,
    ) -> None:
        self._doc_repo = doc_repo
        self._job_repo = job_repo
        self._audit = audit

    def admit(self, document_id: str, kind: JobKind = JobKind.PARSE) -> tuple[JobRecord, bool]:
        """Return the document's job, creating a queued one if none exists.

        Returns:
            (job, created). created is False when an existing job was returned.

        Raises:
            DocumentNotFoundError: if the document does not exist.
        """
        if self._doc_repo.find_by_id(document_id) is None:
            raise DocumentNotFoundError("Document not found")

        job, created = self._job_repo.create_if_absent(document_id, kind.value)
        if not created:
            Log.info(f"Job {job.id} already exists for document {document_id}")
            return job, False

        Log.info(f"Queued {kind.value} job {job.id} for document {document_id}")
        self._audit.record(
            "job_created",
            "job",
            job.id,
            metadata={"documentId": document_id, "kind": kind.value},
        )
        return job, True
