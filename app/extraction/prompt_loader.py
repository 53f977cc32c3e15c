import json
from pathlib import Path

from app.extraction.exceptions import ExtractionError
from app.extraction.models import DocumentTypeTemplate

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"

DEFAULT_TEMPLATE_NAME = "Default"


def load_prompt_template(name: str, path: Path | None = None) -> str:
    """Load a prompt template from a file.

    Args:
        name: Bundled template file name, used when path is not given.
        path: Explicit path to a prompt template file.

    Returns:
        The raw template string with placeholders.

    Raises:
        ExtractionError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / name
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ExtractionError(f"Failed to load prompt template: {exc}") from exc


def load_json_schema(path: Path | None = None) -> str:
    """Load the insights JSON schema. Defaults to the bundled insights_schema.json.

    Raises:
        ExtractionError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "insights_schema.json"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ExtractionError(f"Failed to load JSON schema: {exc}") from exc


def load_document_templates(path: Path | None = None) -> dict[str, DocumentTypeTemplate]:
    """Load per-document-type wording templates keyed by type label.

    The file must define a "Default" entry used for unknown types.

    Raises:
        ExtractionError: if the file cannot be read or is malformed.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "document_templates.json"
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ExtractionError(f"Failed to load document templates: {exc}") from exc

    try:
        templates = {
            label: DocumentTypeTemplate(
                summary=entry["summary"],
                key_points=list(entry["keyPoints"]),
                plain_english=entry["plainEnglish"],
            )
            for label, entry in raw.items()
        }
    except (KeyError, TypeError, AttributeError) as exc:
        raise ExtractionError(f"Malformed document templates: {exc}") from exc

    if DEFAULT_TEMPLATE_NAME not in templates:
        raise ExtractionError(
            f"Document templates must define a '{DEFAULT_TEMPLATE_NAME}' entry"
        )
    return templates
