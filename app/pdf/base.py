from abc import ABC, abstractmethod


class BasePdfRasterizer(ABC):
    """Contract for all PDF rendering adapters."""

    def __init__(self, dpi: int = 150) -> None:
        self._dpi = dpi

    @abstractmethod
    def render(self, pdf_bytes: bytes) -> bytes:
        """Render the first page of a PDF to PNG bytes.

        Args:
            pdf_bytes: Raw PDF file content.

        Returns:
            PNG-encoded image of page one.

        Raises:
            PdfRenderError: if rendering fails for any reason.
        """
