from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CriticalDate:
    date: str
    description: str


@dataclass(frozen=True)
class FinancialDetail:
    label: str
    value: str
    note: str | None = None


@dataclass(frozen=True)
class ImportantClause:
    title: str
    description: str
    significance: str


@dataclass(frozen=True)
class RedFlag:
    issue: str
    explanation: str
    severity: str


@dataclass(frozen=True)
class DocumentInsights:
    """Validated output of the structured extraction pass."""

    document_type: str
    summary: str
    key_points: list[str]
    plain_english: str
    critical_dates: list[CriticalDate] = field(default_factory=list)
    financial_details: list[FinancialDetail] = field(default_factory=list)
    important_clauses: list[ImportantClause] = field(default_factory=list)
    red_flags: list[RedFlag] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON shape the model was asked for."""
        return {
            "documentType": self.document_type,
            "summary": self.summary,
            "keyPoints": list(self.key_points),
            "criticalDates": [
                {"date": d.date, "description": d.description}
                for d in self.critical_dates
            ],
            "financialDetails": [_financial_detail(f) for f in self.financial_details],
            "importantClauses": [
                {
                    "title": c.title,
                    "description": c.description,
                    "significance": c.significance,
                }
                for c in self.important_clauses
            ],
            "redFlags": [
                {
                    "issue": r.issue,
                    "explanation": r.explanation,
                    "severity": r.severity,
                }
                for r in self.red_flags
            ],
            "plainEnglish": self.plain_english,
        }

    def highlights(self) -> dict[str, Any]:
        payload = self.to_payload()
        return {"redFlags": payload["redFlags"], "keyPoints": payload["keyPoints"]}


def _financial_detail(detail: FinancialDetail) -> dict[str, str]:
    item = {"label": detail.label, "value": detail.value}
    if detail.note is not None:
        item["note"] = detail.note
    return item


@dataclass(frozen=True)
class DocumentTypeTemplate:
    """Fixed wording the model must fill in for one document type."""

    summary: str
    key_points: list[str]
    plain_english: str


@dataclass(frozen=True)
class ExtractionResult:
    """Output of the two-pass extraction engine."""

    document_type: str
    insights: DocumentInsights
    provider: str
    model: str
