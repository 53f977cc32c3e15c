from abc import ABC, abstractmethod

from app.extraction.models import ExtractionResult


class BaseExtractor(ABC):
    """Contract for document extraction engines."""

    @abstractmethod
    def extract(self, raw_bytes: bytes, mime: str) -> ExtractionResult:
        """Detect the document type and extract structured insights.

        Args:
            raw_bytes: Document content as uploaded.
            mime: Declared MIME type of the content.

        Returns:
            ExtractionResult with the detected type and validated insights.

        Raises:
            ExtractionError: on any failure.
        """

    @abstractmethod
    def answer(self, messages: list[dict[str, str]]) -> str:
        """Answer a text-only conversation with the configured provider."""
