from dataclasses import dataclass

from app.config.settings import Settings
from app.database.connection import Database
from app.database.repositories.audit_log_repository import AuditLogRepository
from app.database.repositories.document_repository import DocumentRepository
from app.database.repositories.extraction_repository import ExtractionRepository
from app.database.repositories.job_repository import JobRepository
from app.extraction.base import BaseExtractor
from app.extraction.factory import ExtractorFactory
from app.processor.processor import build_processor
from app.services.admission import AdmissionService
from app.services.audit import AuditLogger
from app.services.deletion import DeletionService
from app.services.qa import QuestionService
from app.services.status import StatusService
from app.services.trigger import DispatcherTrigger
from app.services.upload import UploadService
from app.storage.base import BaseStorageGateway
from app.storage.supabase_adapter import SupabaseStorageGateway
from app.worker.dispatcher import Dispatcher
from app.worker.job_runner import JobRunner


@dataclass
class Container:
    """Process-wide collaborators, built once at startup and passed explicitly."""

    settings: Settings
    db: Database | None
    doc_repo: DocumentRepository
    job_repo: JobRepository
    extraction_repo: ExtractionRepository
    upload: UploadService
    admission: AdmissionService
    status: StatusService
    deletion: DeletionService
    qa: QuestionService
    trigger: DispatcherTrigger
    dispatcher: Dispatcher

    def close(self) -> None:
        if self.db is not None:
            self.db.close()


def build_services(
    settings: Settings,
    *,
    db: Database | None,
    doc_repo: DocumentRepository,
    job_repo: JobRepository,
    extraction_repo: ExtractionRepository,
    audit_repo: AuditLogRepository,
    storage: BaseStorageGateway,
    extractor: BaseExtractor,
) -> Container:
    """Wire services, dispatcher and trigger from already-built backends."""
    audit = AuditLogger(audit_repo)
    processor = build_processor(
        doc_repo=doc_repo,
        extraction_repo=extraction_repo,
        storage=storage,
        extractor=extractor,
    )
    job_runner = JobRunner(processor, job_repo, audit, settings)
    return Container(
        settings=settings,
        db=db,
        doc_repo=doc_repo,
        job_repo=job_repo,
        extraction_repo=extraction_repo,
        upload=UploadService(doc_repo, storage, audit, settings),
        admission=AdmissionService(doc_repo, job_repo, audit),
        status=StatusService(doc_repo, job_repo, extraction_repo),
        deletion=DeletionService(doc_repo, job_repo, extraction_repo, storage, audit),
        qa=QuestionService(doc_repo, extraction_repo, extractor),
        trigger=DispatcherTrigger(
            settings.dispatcher_trigger_url,
            settings.dispatcher_secret,
            timeout_seconds=settings.dispatcher_trigger_timeout_seconds,
        ),
        dispatcher=Dispatcher(job_repo, job_runner, settings),
    )


def build_container(settings: Settings) -> Container:
    """Open the connection pool and build every collaborator from settings."""
    db = Database.from_settings(settings)
    storage = SupabaseStorageGateway(
        base_url=settings.storage_url,
        service_key=settings.storage_service_key,
        bucket=settings.storage_bucket,
        timeout_seconds=settings.storage_timeout_seconds,
        upload_url_ttl_seconds=settings.upload_url_ttl_seconds,
        download_url_ttl_seconds=settings.download_url_ttl_seconds,
    )
    return build_services(
        settings,
        db=db,
        doc_repo=DocumentRepository(db),
        job_repo=JobRepository(db, settings.max_job_attempts),
        extraction_repo=ExtractionRepository(db),
        audit_repo=AuditLogRepository(db),
        storage=storage,
        extractor=ExtractorFactory.create(settings),
    )
