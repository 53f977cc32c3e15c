from datetime import datetime, timezone
from unittest.mock import MagicMock

import psycopg
import pytest
from fastapi.testclient import TestClient

from app.api.app import create_app
from app.config.settings import Settings
from app.database.models import DocumentRecord, ExtractionRecord, JobRecord
from app.exceptions import AuthorizationError, ValidationError
from app.processor.exceptions import DocumentNotFoundError
from app.services.qa import Answer
from app.services.status import DocumentStatusView
from app.services.upload import UploadTicket
from app.worker.dispatcher import DispatchReport
from app.worker.job_runner import JobOutcome

DOC_ID = "0b6f0f38-3a5c-4c38-9c62-0d6b8f0f3c11"
NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _make_container() -> MagicMock:
    container = MagicMock()
    container.settings = Settings(dispatcher_secret="s3cret")
    container.trigger.enabled = False
    return container


def _make_client(container: MagicMock, **kwargs: bool) -> TestClient:
    return TestClient(create_app(container), **kwargs)


def _make_job(status: str = "queued") -> JobRecord:
    return JobRecord(
        id="job-1",
        document_id=DOC_ID,
        kind="parse",
        status=status,
        created_at=NOW,
        updated_at=NOW,
    )


class TestUploadToken:
    def test_returns_ticket(self) -> None:
        container = _make_container()
        container.upload.issue.return_value = UploadTicket(
            document_id=DOC_ID,
            session_id="sess",
            upload_url="http://storage/upload?token=t",
            token="t",
            path=f"anon/{DOC_ID}/original.pdf",
            expires_at=NOW,
        )

        response = _make_client(container).post(
            "/upload/token",
            json={"filename": "bill.pdf", "mime": "application/pdf", "size": 1024},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["documentId"] == DOC_ID
        assert body["sessionId"] == "sess"
        assert body["uploadUrl"] == "http://storage/upload?token=t"
        assert body["path"] == f"anon/{DOC_ID}/original.pdf"
        assert body["expiresAt"].startswith("2025-01-01T00:00:00")
        container.upload.issue.assert_called_once_with("bill.pdf", "application/pdf", 1024)

    def test_service_validation_error_is_400(self) -> None:
        container = _make_container()
        container.upload.issue.side_effect = ValidationError(
            "Invalid upload request", details=[{"loc": ["size"], "msg": "too large"}]
        )

        response = _make_client(container).post(
            "/upload/token",
            json={"filename": "bill.pdf", "mime": "application/pdf", "size": 10**9},
        )

        assert response.status_code == 400
        assert response.json() == {
            "error": "Invalid upload request",
            "details": [{"loc": ["size"], "msg": "too large"}],
        }

    def test_malformed_body_is_400(self) -> None:
        container = _make_container()
        response = _make_client(container).post("/upload/token", json={"filename": "x"})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"
        container.upload.issue.assert_not_called()

    def test_database_failure_is_500(self) -> None:
        container = _make_container()
        container.upload.issue.side_effect = psycopg.OperationalError("connection refused")
        response = _make_client(container).post(
            "/upload/token",
            json={"filename": "bill.pdf", "mime": "application/pdf", "size": 10},
        )
        assert response.status_code == 500
        assert response.json() == {"error": "Backend failure"}

    def test_unexpected_failure_is_500(self) -> None:
        container = _make_container()
        container.upload.issue.side_effect = RuntimeError("boom")
        response = _make_client(container, raise_server_exceptions=False).post(
            "/upload/token",
            json={"filename": "bill.pdf", "mime": "application/pdf", "size": 10},
        )
        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


class TestAdmitJob:
    def test_new_job(self) -> None:
        container = _make_container()
        container.admission.admit.return_value = (_make_job(), True)

        response = _make_client(container).post(f"/documents/{DOC_ID}/job")

        assert response.status_code == 200
        body = response.json()
        assert body["jobId"] == "job-1"
        assert body["status"] == "queued"
        assert "createdAt" in body
        assert "message" not in body
        container.admission.admit.assert_called_once_with(DOC_ID)

    def test_existing_job(self) -> None:
        container = _make_container()
        container.admission.admit.return_value = (_make_job("running"), False)

        response = _make_client(container).post(f"/documents/{DOC_ID}/job")

        assert response.json() == {
            "message": "Job already exists",
            "jobId": "job-1",
            "status": "running",
        }

    def test_new_job_wakes_dispatcher(self) -> None:
        container = _make_container()
        container.trigger.enabled = True
        container.admission.admit.return_value = (_make_job(), True)

        _make_client(container).post(f"/documents/{DOC_ID}/job")

        container.trigger.notify.assert_called_once()

    def test_existing_job_does_not_wake_dispatcher(self) -> None:
        container = _make_container()
        container.trigger.enabled = True
        container.admission.admit.return_value = (_make_job(), False)

        _make_client(container).post(f"/documents/{DOC_ID}/job")

        container.trigger.notify.assert_not_called()

    def test_missing_document_is_404(self) -> None:
        container = _make_container()
        container.admission.admit.side_effect = DocumentNotFoundError("Document not found")

        response = _make_client(container).post(f"/documents/{DOC_ID}/job")

        assert response.status_code == 404
        assert response.json() == {"error": "Document not found"}

    def test_malformed_id_is_400(self) -> None:
        container = _make_container()
        response = _make_client(container).post("/documents/not-a-uuid/job")
        assert response.status_code == 400
        container.admission.admit.assert_not_called()


class TestStatus:
    def test_document_with_job(self) -> None:
        container = _make_container()
        job = _make_job("error")
        job.error = "Failed to download file: HTTP 404"
        job.error_kind = "download"
        container.status.get_status.return_value = DocumentStatusView(
            document=DocumentRecord(
                id=DOC_ID,
                session_id="sess",
                filename="bill.pdf",
                mime="application/pdf",
                size_bytes=10,
                storage_path="p",
                status="queued",
                created_at=NOW,
                expires_at=NOW,
            ),
            job=job,
        )

        body = _make_client(container).get(f"/documents/{DOC_ID}/status").json()

        assert body["id"] == DOC_ID
        assert body["status"] == "queued"
        assert body["detectedType"] is None
        assert body["job"]["status"] == "error"
        assert body["job"]["error"] == "Failed to download file: HTTP 404"
        assert body["job"]["errorKind"] == "download"
        assert "sessionId" not in body

    def test_document_without_job(self) -> None:
        container = _make_container()
        container.status.get_status.return_value = DocumentStatusView(
            document=DocumentRecord(
                id=DOC_ID,
                session_id="sess",
                filename="bill.pdf",
                mime="application/pdf",
                size_bytes=10,
                storage_path="p",
                status="queued",
            ),
            job=None,
        )
        body = _make_client(container).get(f"/documents/{DOC_ID}/status").json()
        assert body["job"] is None


class TestExtraction:
    def test_returns_extraction(self) -> None:
        container = _make_container()
        container.status.get_extraction.return_value = ExtractionRecord(
            id="ex-1",
            document_id=DOC_ID,
            provider="openai",
            fields={"keyPoints": ["a", "b", "c"]},
            insights={"redFlags": [], "keyPoints": ["a", "b", "c"]},
            warnings=["Size mismatch"],
            created_at=NOW,
        )

        body = _make_client(container).get(f"/documents/{DOC_ID}/extraction").json()

        assert body["id"] == "ex-1"
        assert body["confidence"] is None
        assert body["fields"] == {"keyPoints": ["a", "b", "c"]}
        assert body["warnings"] == ["Size mismatch"]


class TestDelete:
    def test_deletes_with_session(self) -> None:
        container = _make_container()
        response = _make_client(container).request(
            "DELETE", f"/documents/{DOC_ID}", json={"session_id": "sess"}
        )
        assert response.status_code == 200
        assert response.json() == {"success": True}
        container.deletion.delete.assert_called_once_with(DOC_ID, "sess")

    def test_wrong_session_is_403(self) -> None:
        container = _make_container()
        container.deletion.delete.side_effect = AuthorizationError("Unauthorized: Invalid session")
        response = _make_client(container).request(
            "DELETE", f"/documents/{DOC_ID}", json={"session_id": "other"}
        )
        assert response.status_code == 403

    def test_missing_session_is_400(self) -> None:
        container = _make_container()
        response = _make_client(container).request("DELETE", f"/documents/{DOC_ID}", json={})
        assert response.status_code == 400
        container.deletion.delete.assert_not_called()


class TestAsk:
    def test_returns_answer(self) -> None:
        container = _make_container()
        container.qa.ask.return_value = Answer(
            answer="$120.00",
            conversation_history=[
                {"role": "user", "content": "How much?"},
                {"role": "assistant", "content": "$120.00"},
            ],
        )

        response = _make_client(container).post(
            f"/documents/{DOC_ID}/ask", json={"question": "How much?"}
        )

        assert response.status_code == 200
        assert response.json()["answer"] == "$120.00"
        assert len(response.json()["conversationHistory"]) == 2
        container.qa.ask.assert_called_once_with(DOC_ID, "How much?", [])

    def test_forwards_history(self) -> None:
        container = _make_container()
        container.qa.ask.return_value = Answer(answer="ok")
        history = [{"role": "user", "content": "Hi"}, {"role": "assistant", "content": "Hey"}]

        _make_client(container).post(
            f"/documents/{DOC_ID}/ask",
            json={"question": "Due?", "conversationHistory": history},
        )

        assert container.qa.ask.call_args.args[2] == history


class TestDispatch:
    @pytest.mark.parametrize("method", ["GET", "POST"])
    def test_runs_cycle_with_secret(self, method: str) -> None:
        container = _make_container()
        container.dispatcher.run_cycle.return_value = DispatchReport(
            processed=2,
            results=[JobOutcome("job-1", "done"), JobOutcome("job-2", "error", "boom")],
        )

        response = _make_client(container).request(
            method, "/internal/dispatch", headers={"Authorization": "Bearer s3cret"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "processed": 2,
            "results": [
                {"jobId": "job-1", "status": "done"},
                {"jobId": "job-2", "status": "error", "error": "boom"},
            ],
        }

    @pytest.mark.parametrize("headers", [{}, {"Authorization": "Bearer wrong"}])
    def test_rejects_without_secret(self, headers: dict[str, str]) -> None:
        container = _make_container()
        response = _make_client(container).post("/internal/dispatch", headers=headers)
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}
        container.dispatcher.run_cycle.assert_not_called()

    def test_disabled_when_secret_unset(self) -> None:
        container = _make_container()
        container.settings = Settings(dispatcher_secret="")
        response = _make_client(container).post(
            "/internal/dispatch", headers={"Authorization": "Bearer "}
        )
        assert response.status_code == 401
        container.dispatcher.run_cycle.assert_not_called()
