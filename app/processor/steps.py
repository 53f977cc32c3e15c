from app.database.repositories.document_repository import DocumentRepository
from app.database.repositories.extraction_repository import ExtractionRepository
from app.extraction.base import BaseExtractor
from app.logging.logger import Log
from app.processor.exceptions import DocumentNotFoundError
from app.processor.pipeline import PipelineContext, PipelineStep
from app.storage.base import BaseStorageGateway


class LoadDocumentStep(PipelineStep):
    def __init__(self, doc_repo: DocumentRepository) -> None:
        self._doc_repo = doc_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        document = self._doc_repo.find_by_id(context.job.document_id)
        if document is None:
            raise DocumentNotFoundError("Document not found")
        context.document = document
        return context


class DownloadStep(PipelineStep):
    def __init__(self, storage: BaseStorageGateway) -> None:
        self._storage = storage

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.document is None:
            raise ValueError("PipelineContext.document must be set before download")
        document = context.document
        context.raw_bytes = self._storage.download(document.storage_path)
        Log.info(f"Downloaded {len(context.raw_bytes)} bytes for document {document.id}")

        if len(context.raw_bytes) != document.size_bytes:
            warning = (
                f"Size mismatch: expected {document.size_bytes} bytes, "
                f"got {len(context.raw_bytes)}"
            )
            context.warnings.append(warning)
            Log.warning(f"Document {document.id}: {warning}")
        return context


class ExtractStep(PipelineStep):
    def __init__(self, extractor: BaseExtractor) -> None:
        self._extractor = extractor

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.document is None:
            raise ValueError("PipelineContext.document must be set before extraction")
        context.extraction_result = self._extractor.extract(
            context.raw_bytes, context.document.mime
        )
        return context


class PersistExtractionStep(PipelineStep):
    def __init__(self, extraction_repo: ExtractionRepository) -> None:
        self._extraction_repo = extraction_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.extraction_result is None:
            raise ValueError("PipelineContext.extraction_result must be set before persist")
        result = context.extraction_result
        context.extraction = self._extraction_repo.create(
            document_id=context.job.document_id,
            provider=result.provider,
            fields=result.insights.to_payload(),
            insights=result.insights.highlights(),
            warnings=list(context.warnings),
        )
        Log.info(
            f"Saved extraction {context.extraction.id} for document {context.job.document_id}"
        )
        return context


class CompleteDocumentStep(PipelineStep):
    def __init__(self, doc_repo: DocumentRepository) -> None:
        self._doc_repo = doc_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.extraction_result is None:
            raise ValueError("PipelineContext.extraction_result must be set before completion")
        self._doc_repo.mark_succeeded(
            context.job.document_id,
            detected_type=context.extraction_result.document_type,
        )
        return context
