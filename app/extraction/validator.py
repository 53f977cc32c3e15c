"""Validates parsed model output against the insights schema."""

from typing import Any

from app.extraction.exceptions import ExtractionValidationError
from app.extraction.models import (
    CriticalDate,
    DocumentInsights,
    FinancialDetail,
    ImportantClause,
    RedFlag,
)

MIN_KEY_POINTS = 3
MAX_KEY_POINTS = 5
VALID_SEVERITIES = frozenset({"low", "medium", "high"})

_REQUIRED_FIELDS = (
    "documentType",
    "summary",
    "keyPoints",
    "criticalDates",
    "financialDetails",
    "importantClauses",
    "redFlags",
    "plainEnglish",
)


def validate_and_build(data: dict[str, Any]) -> DocumentInsights:
    """Validate raw parsed JSON and build DocumentInsights.

    No coercion: a wrong type anywhere is a violation.

    Raises:
        ExtractionValidationError: on any validation failure.
    """
    for name in _REQUIRED_FIELDS:
        if name not in data:
            raise ExtractionValidationError(f"Missing required top-level field: {name}")

    return DocumentInsights(
        document_type=_require_str(data["documentType"], "documentType"),
        summary=_require_str(data["summary"], "summary"),
        key_points=_build_key_points(data["keyPoints"]),
        plain_english=_require_str(data["plainEnglish"], "plainEnglish"),
        critical_dates=[
            CriticalDate(
                date=_require_str(item.get("date"), f"criticalDates[{i}].date"),
                description=_require_str(
                    item.get("description"), f"criticalDates[{i}].description"
                ),
            )
            for i, item in _objects(data["criticalDates"], "criticalDates")
        ],
        financial_details=[
            _build_financial_detail(item, i)
            for i, item in _objects(data["financialDetails"], "financialDetails")
        ],
        important_clauses=[
            ImportantClause(
                title=_require_str(item.get("title"), f"importantClauses[{i}].title"),
                description=_require_str(
                    item.get("description"), f"importantClauses[{i}].description"
                ),
                significance=_require_str(
                    item.get("significance"), f"importantClauses[{i}].significance"
                ),
            )
            for i, item in _objects(data["importantClauses"], "importantClauses")
        ],
        red_flags=[
            _build_red_flag(item, i)
            for i, item in _objects(data["redFlags"], "redFlags")
        ],
    )


def _require_str(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise ExtractionValidationError(f"'{path}' must be a string")
    return value


def _objects(raw: Any, path: str) -> list[tuple[int, dict[str, Any]]]:
    if not isinstance(raw, list):
        raise ExtractionValidationError(f"'{path}' must be a list")
    items: list[tuple[int, dict[str, Any]]] = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ExtractionValidationError(f"'{path}[{i}]' must be an object")
        items.append((i, item))
    return items


def _build_key_points(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        raise ExtractionValidationError("'keyPoints' must be a list")
    if not MIN_KEY_POINTS <= len(raw) <= MAX_KEY_POINTS:
        raise ExtractionValidationError(
            f"'keyPoints' must have {MIN_KEY_POINTS}-{MAX_KEY_POINTS} entries, got {len(raw)}"
        )
    return [_require_str(item, f"keyPoints[{i}]") for i, item in enumerate(raw)]


def _build_financial_detail(raw: dict[str, Any], index: int) -> FinancialDetail:
    note = raw.get("note")
    if note is not None and not isinstance(note, str):
        raise ExtractionValidationError(
            f"'financialDetails[{index}].note' must be a string or absent"
        )
    return FinancialDetail(
        label=_require_str(raw.get("label"), f"financialDetails[{index}].label"),
        value=_require_str(raw.get("value"), f"financialDetails[{index}].value"),
        note=note,
    )


def _build_red_flag(raw: dict[str, Any], index: int) -> RedFlag:
    severity = raw.get("severity")
    if severity not in VALID_SEVERITIES:
        raise ExtractionValidationError(
            f"'redFlags[{index}].severity' must be one of "
            f"{sorted(VALID_SEVERITIES)}, got {severity!r}"
        )
    return RedFlag(
        issue=_require_str(raw.get("issue"), f"redFlags[{index}].issue"),
        explanation=_require_str(raw.get("explanation"), f"redFlags[{index}].explanation"),
        severity=severity,
    )
