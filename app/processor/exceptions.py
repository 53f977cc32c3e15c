from app.exceptions import NotFoundError


class DocumentNotFoundError(NotFoundError):
    """Raised when a document cannot be found in the database."""


class ExtractionNotFoundError(NotFoundError):
    """Raised when a document has no stored extraction."""
