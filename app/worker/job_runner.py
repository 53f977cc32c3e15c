from dataclasses import dataclass

import psycopg

from app.config.settings import Settings
from app.database.models import JobRecord, JobStatus
from app.database.repositories.job_repository import JobRepository
from app.exceptions import DownloadError, error_kind_of
from app.extraction.exceptions import ExtractionNetworkError
from app.logging.logger import Log
from app.processor.models import ProcessorResult
from app.processor.processor import Processor
from app.services.audit import AuditLogger
from app.storage.exceptions import StorageError

TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    DownloadError,
    ExtractionNetworkError,
    StorageError,
    psycopg.OperationalError,
)


@dataclass(frozen=True)
class JobOutcome:
    """How one claimed job ended this cycle."""

    job_id: str
    status: str
    error: str | None = None

    def to_payload(self) -> dict[str, str]:
        payload = {"jobId": self.job_id, "status": self.status}
        if self.error is not None:
            payload["error"] = self.error
        return payload


class JobRunner:
    """Run one claimed job, catch exceptions, and apply retry logic."""

    def __init__(
        self,
        processor: Processor,
        job_repo: JobRepository,
        audit: AuditLogger,
        settings: Settings,
    ) -> None:
        self._processor = processor
        self._job_repo = job_repo
        self._audit = audit
        self._settings = settings

    def run(self, job: JobRecord) -> JobOutcome:
        """Execute a single running job. Never raises."""
        Log.info(f"Running job {job.id} (attempt {job.attempts})", document_id=job.document_id)
        try:
            result = self._processor.process(job)
        except Exception as exc:
            return self._handle_failure(job, exc)

        try:
            return self._complete(job, result)
        except Exception as exc:
            return self._handle_failure(job, exc)

    def retry_delay(self, attempts: int) -> float:
        """Exponential backoff for the given attempt number, capped."""
        base = self._settings.retry_backoff_base_seconds
        delay = base * 2 ** max(attempts - 1, 0)
        return float(min(delay, self._settings.retry_backoff_max_seconds))

    def _complete(self, job: JobRecord, result: ProcessorResult) -> JobOutcome:
        if not self._job_repo.mark_done(job.id, result.to_job_result()):
            Log.warning(f"Job {job.id} was no longer running; result not recorded")
            return JobOutcome(job.id, JobStatus.ERROR.value, "Job was no longer running")

        Log.info(f"Job {job.id} completed successfully")
        self._audit.record(
            "job_completed",
            "job",
            job.id,
            metadata={
                "documentId": job.document_id,
                "extractionId": result.extraction_id,
                "detectedType": result.detected_type,
                "warnings": result.warnings,
            },
        )
        return JobOutcome(job.id, JobStatus.DONE.value)

    def _handle_failure(self, job: JobRecord, exc: Exception) -> JobOutcome:
        """Requeue transient failures with attempts left; everything else is terminal."""
        message = str(exc) or exc.__class__.__name__
        kind = error_kind_of(exc).value
        Log.error(
            f"Job {job.id} failed: {message}", document_id=job.document_id, error_kind=kind
        )

        try:
            if self._is_retryable(job, exc):
                delay = self.retry_delay(job.attempts)
                self._job_repo.requeue(job.id, message, kind, delay)
                Log.warning(
                    f"Job {job.id} will be retried in {delay:.0f}s "
                    f"(attempt {job.attempts} of {self._settings.max_job_attempts})"
                )
                return JobOutcome(job.id, JobStatus.QUEUED.value, message)

            self._job_repo.mark_error(job.id, message, kind)
        except Exception as write_exc:
            Log.exception(f"Could not record failure of job {job.id}: {write_exc}")
            return JobOutcome(job.id, JobStatus.RUNNING.value, message)

        Log.error(f"Job {job.id} permanently failed after {job.attempts} attempts")
        self._audit.record(
            "job_failed",
            "job",
            job.id,
            metadata={"documentId": job.document_id, "error": message, "errorKind": kind},
        )
        return JobOutcome(job.id, JobStatus.ERROR.value, message)

    def _is_retryable(self, job: JobRecord, exc: Exception) -> bool:
        return (
            isinstance(exc, TRANSIENT_ERRORS)
            and job.attempts < self._settings.max_job_attempts
        )
