from app.exceptions import ExtractionError


class ExtractionValidationError(ExtractionError):
    """Raised when the model output violates the insights schema."""


class ExtractionNetworkError(ExtractionError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""


class UnsupportedDocumentError(ExtractionError):
    """Raised when a document's MIME type cannot be sent to the vision model."""
