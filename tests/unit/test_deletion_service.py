from unittest.mock import MagicMock

import pytest

from app.database.models import DocumentRecord
from app.exceptions import AuthorizationError
from app.processor.exceptions import DocumentNotFoundError
from app.services.deletion import DeletionService

SESSION = "owner-session-token"


def _make_service(
    storage_path: str = "anon/doc-1/original.pdf",
) -> tuple[DeletionService, MagicMock, MagicMock, MagicMock, MagicMock, MagicMock]:
    doc_repo = MagicMock()
    doc_repo.find_by_id.return_value = DocumentRecord(
        id="doc-1",
        session_id=SESSION,
        filename="bill.pdf",
        mime="application/pdf",
        size_bytes=10,
        storage_path=storage_path,
        status="succeeded",
    )
    job_repo = MagicMock()
    job_repo.delete_for_document.return_value = 1
    extraction_repo = MagicMock()
    extraction_repo.delete_for_document.return_value = 1
    storage = MagicMock()
    storage.delete.return_value = True
    audit = MagicMock()
    service = DeletionService(doc_repo, job_repo, extraction_repo, storage, audit)
    return service, doc_repo, job_repo, extraction_repo, storage, audit


class TestDelete:
    def test_cascades_in_order(self) -> None:
        service, doc_repo, job_repo, extraction_repo, storage, _audit = _make_service()
        order = MagicMock()
        order.attach_mock(storage.delete, "blob")
        order.attach_mock(extraction_repo.delete_for_document, "extractions")
        order.attach_mock(job_repo.delete_for_document, "jobs")
        order.attach_mock(doc_repo.delete, "document")

        service.delete("doc-1", SESSION)

        assert [c[0] for c in order.mock_calls] == ["blob", "extractions", "jobs", "document"]

    def test_blob_failure_still_deletes_rows(self) -> None:
        service, doc_repo, job_repo, extraction_repo, storage, audit = _make_service()
        storage.delete.return_value = False

        service.delete("doc-1", SESSION)

        extraction_repo.delete_for_document.assert_called_once_with("doc-1")
        job_repo.delete_for_document.assert_called_once_with("doc-1")
        doc_repo.delete.assert_called_once_with("doc-1")
        assert audit.record.call_args.kwargs["metadata"]["blobDeleted"] is False

    def test_skips_blob_when_no_path(self) -> None:
        service, doc_repo, _jobs, _extractions, storage, _audit = _make_service(storage_path="")
        service.delete("doc-1", SESSION)
        storage.delete.assert_not_called()
        doc_repo.delete.assert_called_once_with("doc-1")

    def test_audits_with_hashed_session(self) -> None:
        service, _docs, _jobs, _extractions, _storage, audit = _make_service()
        service.delete("doc-1", SESSION)
        assert audit.record.call_args.args[:3] == ("document.deleted", "document", "doc-1")
        user = audit.record.call_args.kwargs["user_identifier"]
        assert user.startswith("session:")
        assert SESSION not in user


class TestDeleteRejected:
    def test_session_mismatch_removes_nothing(self) -> None:
        service, doc_repo, job_repo, extraction_repo, storage, _audit = _make_service()

        with pytest.raises(AuthorizationError) as exc_info:
            service.delete("doc-1", "someone-else")

        assert exc_info.value.status_code == 403
        storage.delete.assert_not_called()
        extraction_repo.delete_for_document.assert_not_called()
        job_repo.delete_for_document.assert_not_called()
        doc_repo.delete.assert_not_called()

    def test_missing_document_raises_not_found(self) -> None:
        service, doc_repo, _jobs, _extractions, storage, _audit = _make_service()
        doc_repo.find_by_id.return_value = None

        with pytest.raises(DocumentNotFoundError):
            service.delete("doc-1", SESSION)
        storage.delete.assert_not_called()
