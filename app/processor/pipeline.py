from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from app.database.models import DocumentRecord, ExtractionRecord, JobRecord
from app.extraction.models import ExtractionResult


@dataclass(slots=True)
class PipelineContext:
    job: JobRecord
    document: DocumentRecord | None = None
    raw_bytes: bytes = b""
    warnings: list[str] = field(default_factory=list)
    extraction_result: ExtractionResult | None = None
    extraction: ExtractionRecord | None = None


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
