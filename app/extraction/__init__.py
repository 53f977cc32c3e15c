from app.extraction.base import BaseExtractor
from app.extraction.extractor import Extractor
from app.extraction.factory import ExtractorFactory

__all__ = ["BaseExtractor", "Extractor", "ExtractorFactory"]
