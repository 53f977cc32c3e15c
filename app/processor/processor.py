from app.database.models import JobRecord
from app.database.repositories.document_repository import DocumentRepository
from app.database.repositories.extraction_repository import ExtractionRepository
from app.extraction.base import BaseExtractor
from app.logging.logger import Log
from app.processor.models import ProcessorResult
from app.processor.pipeline import PipelineContext, PipelineStep
from app.processor.steps import (
    CompleteDocumentStep,
    DownloadStep,
    ExtractStep,
    LoadDocumentStep,
    PersistExtractionStep,
)
from app.storage.base import BaseStorageGateway


class Processor:
    """Runs the parse pipeline for one claimed job.

    Pipeline: load document -> download -> extract -> persist extraction ->
    mark document succeeded. The extraction row is written before the
    document and job flip. Any step may raise; the job runner records the
    failure and the document keeps its prior status.
    """

    def __init__(self, steps: list[PipelineStep]) -> None:
        self._steps = steps

    def process(self, job: JobRecord) -> ProcessorResult:
        Log.info(f"Processing document {job.document_id} for job {job.id}")
        context = PipelineContext(job=job)
        for step in self._steps:
            context = step.run(context)

        if context.extraction is None or context.extraction_result is None:
            raise ValueError(f"Pipeline for job {job.id} finished without an extraction")
        return ProcessorResult(
            extraction_id=context.extraction.id,
            detected_type=context.extraction_result.document_type,
            warnings=list(context.warnings),
        )


def build_processor(
    *,
    doc_repo: DocumentRepository,
    extraction_repo: ExtractionRepository,
    storage: BaseStorageGateway,
    extractor: BaseExtractor,
) -> Processor:
    """Build a Processor with the parse pipeline steps."""
    return Processor(
        steps=[
            LoadDocumentStep(doc_repo),
            DownloadStep(storage),
            ExtractStep(extractor),
            PersistExtractionStep(extraction_repo),
            CompleteDocumentStep(doc_repo),
        ]
    )
