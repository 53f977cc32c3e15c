from typing import ClassVar

from app.config.settings import Settings
from app.extraction.base import BaseExtractor
from app.extraction.example_client_adapter import ExampleClientAdapter
from app.extraction.extractor import Extractor
from app.extraction.openai_client_adapter import OpenAIClientAdapter
from app.pdf.factory import PdfRasterizerFactory


class ExtractorFactory:
    """Creates the configured extraction engine."""

    SUPPORTED_PROVIDERS: ClassVar[list[str]] = ["example", "openai", "openai_compatible"]

    @classmethod
    def create(cls, settings: Settings) -> BaseExtractor:
        """Create a configured extractor from application settings."""
        provider = settings.extraction_provider.lower()
        rasterizer = PdfRasterizerFactory.create(settings)
        common = {
            "rasterizer": rasterizer,
            "temperature": settings.extraction_temperature,
            "seed": settings.extraction_seed,
            "detection_max_tokens": settings.detection_max_tokens,
            "extraction_max_tokens": settings.extraction_max_tokens,
            "qa_temperature": settings.qa_temperature,
            "qa_max_tokens": settings.qa_max_tokens,
        }
        if provider == "example":
            return Extractor(client=ExampleClientAdapter(), model="example", **common)
        if provider == "openai":
            client = OpenAIClientAdapter(
                api_key=settings.openai_api_key,
                timeout_seconds=settings.openai_timeout_seconds,
                base_url=None,
                provider="openai",
            )
            return Extractor(client=client, model=settings.openai_model_name, **common)
        if provider == "openai_compatible":
            base_url = settings.openai_compatible_base_url.strip()
            if not base_url:
                raise ValueError(
                    "openai_compatible_base_url is required for "
                    "extraction_provider=openai_compatible"
                )
            client = OpenAIClientAdapter(
                api_key=settings.openai_compatible_api_key,
                timeout_seconds=settings.openai_timeout_seconds,
                base_url=base_url,
                provider="openai_compatible",
            )
            return Extractor(
                client=client,
                model=settings.openai_compatible_model_name,
                **common,
            )
        raise ValueError(
            f"Unknown extraction provider '{provider}'. Choose from: {cls.SUPPORTED_PROVIDERS}"
        )
