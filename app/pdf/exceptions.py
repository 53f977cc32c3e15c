from app.exceptions import ExtractionError


class PdfRenderError(ExtractionError):
    """Raised when a PDF cannot be rendered to an image."""
