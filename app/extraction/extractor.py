"""Two-pass document extractor: type detection, then templated structured extraction."""

import json
import re
from pathlib import Path

from app.extraction.base import BaseExtractor
from app.extraction.client_base import BaseExtractionClient
from app.extraction.exceptions import ExtractionError
from app.extraction.image import prepare_image_url
from app.extraction.models import DocumentTypeTemplate, ExtractionResult
from app.extraction.prompt_loader import (
    DEFAULT_TEMPLATE_NAME,
    load_document_templates,
    load_json_schema,
    load_prompt_template,
)
from app.extraction.validator import validate_and_build
from app.logging.logger import Log
from app.pdf.base import BasePdfRasterizer

UNKNOWN_DOCUMENT_TYPE = "Unknown Document"

_OPENING_FENCE_RE = re.compile(r"^\s*```[A-Za-z0-9_-]*")
_CLOSING_FENCE_RE = re.compile(r"```\s*$")


class Extractor(BaseExtractor):
    """Extracts structured insights from a document image using an AI provider.

    Holds only immutable configuration, so one instance can serve concurrent
    dispatcher workers.
    """

    def __init__(
        self,
        *,
        client: BaseExtractionClient,
        model: str,
        rasterizer: BasePdfRasterizer,
        temperature: float = 0.0,
        seed: int = 12345,
        detection_max_tokens: int = 50,
        extraction_max_tokens: int = 4000,
        qa_temperature: float = 0.7,
        qa_max_tokens: int = 500,
        detection_prompt_path: Path | None = None,
        extraction_prompt_path: Path | None = None,
        json_schema_path: Path | None = None,
        templates_path: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._rasterizer = rasterizer
        self._temperature = max(0.0, min(0.2, temperature))
        self._seed = seed
        self._detection_max_tokens = detection_max_tokens
        self._extraction_max_tokens = extraction_max_tokens
        self._qa_temperature = qa_temperature
        self._qa_max_tokens = qa_max_tokens
        self._detection_prompt = load_prompt_template(
            "detection_prompt.txt", detection_prompt_path
        )
        self._extraction_prompt = load_prompt_template(
            "extraction_prompt.txt", extraction_prompt_path
        )
        self._json_schema = load_json_schema(json_schema_path)
        self._templates = load_document_templates(templates_path)
        self._templates_by_key = {label.lower(): t for label, t in self._templates.items()}

    def extract(self, raw_bytes: bytes, mime: str) -> ExtractionResult:
        image_url = prepare_image_url(raw_bytes, mime, self._rasterizer)

        document_type = self.detect_type(image_url)
        Log.info(f"Detected document type: {document_type}")

        prompt = self.build_extraction_prompt(document_type)
        Log.debug(f"Extraction prompt:\n{prompt}")

        raw_response = self._client.create_vision_completion(
            model=self._model,
            temperature=self._temperature,
            seed=self._seed,
            max_tokens=self._extraction_max_tokens,
            prompt=prompt,
            image_url=image_url,
            json_mode=True,
        )
        Log.debug(f"AI raw response:\n{raw_response}")
        if not raw_response.strip():
            raise ExtractionError("No response from extraction service")

        insights = validate_and_build(self._parse_json(raw_response))
        Log.info(
            f"Extraction complete: {len(insights.key_points)} key points, "
            f"{len(insights.red_flags)} red flags"
        )
        return ExtractionResult(
            document_type=document_type,
            insights=insights,
            provider=self._client.provider,
            model=self._model,
        )

    def detect_type(self, image_url: str) -> str:
        """First pass: ask the model for a short document type label."""
        raw_label = self._client.create_vision_completion(
            model=self._model,
            temperature=self._temperature,
            seed=self._seed,
            max_tokens=self._detection_max_tokens,
            prompt=self._detection_prompt,
            image_url=image_url,
        )
        Log.debug(f"AI raw type label: {raw_label!r}")
        return self._clean_label(raw_label)

    def select_template(self, document_type: str) -> DocumentTypeTemplate:
        template = self._templates_by_key.get(document_type.lower())
        if template is None:
            return self._templates[DEFAULT_TEMPLATE_NAME]
        return template

    def build_extraction_prompt(self, document_type: str) -> str:
        template = self.select_template(document_type)
        return self._extraction_prompt.format(
            document_type=document_type,
            summary_template=template.summary,
            key_points_template="; ".join(template.key_points),
            plain_english_template=template.plain_english,
            json_schema=self._json_schema,
        )

    def answer(self, messages: list[dict[str, str]]) -> str:
        return self._client.create_chat_completion(
            model=self._model,
            temperature=self._qa_temperature,
            max_tokens=self._qa_max_tokens,
            messages=messages,
        )

    @staticmethod
    def _clean_label(raw: str) -> str:
        label = raw.strip()
        if label.startswith("{"):
            try:
                parsed = json.loads(label)
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, dict):
                value = parsed.get("documentType") or parsed.get("type") or ""
                label = value.strip() if isinstance(value, str) else ""
        label = label.strip().rstrip(".").strip("\"'`").rstrip(".").strip()
        return label or UNKNOWN_DOCUMENT_TYPE

    @staticmethod
    def _parse_json(raw: str) -> dict[str, object]:
        cleaned = _OPENING_FENCE_RE.sub("", raw.strip(), count=1)
        cleaned = _CLOSING_FENCE_RE.sub("", cleaned, count=1).strip()

        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise ExtractionError(f"Invalid JSON response: {exc}") from exc

        if not isinstance(parsed, dict):
            raise ExtractionError("JSON response must be an object")
        return parsed
