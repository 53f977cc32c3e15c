from dataclasses import dataclass

from app.database.models import DocumentRecord, ExtractionRecord, JobKind, JobRecord
from app.database.repositories.document_repository import DocumentRepository
from app.database.repositories.extraction_repository import ExtractionRepository
from app.database.repositories.job_repository import JobRepository
from app.processor.exceptions import DocumentNotFoundError, ExtractionNotFoundError


@dataclass(frozen=True)
class DocumentStatusView:
    document: DocumentRecord
    job: JobRecord | None


class StatusService:
    """Read-only projections for client polling. No side effects."""

    def __init__(
        self,
        doc_repo: DocumentRepository,
        job_repo: JobRepository,
        extraction_repo: ExtractionRepository,
    ) -> None:
        self._doc_repo = doc_repo
        self._job_repo = job_repo
        self._extraction_repo = extraction_repo

    def get_status(self, document_id: str) -> DocumentStatusView:
        document = self._doc_repo.find_by_id(document_id)
        if document is None:
            raise DocumentNotFoundError("Document not found")
        job = self._job_repo.find_latest_for_document(document_id, JobKind.PARSE.value)
        return DocumentStatusView(document=document, job=job)

    def get_extraction(self, document_id: str) -> ExtractionRecord:
        if self._doc_repo.find_by_id(document_id) is None:
            raise DocumentNotFoundError("Document not found")
        extraction = self._extraction_repo.find_latest_for_document(document_id)
        if extraction is None:
            raise ExtractionNotFoundError("Extraction not found")
        return extraction
