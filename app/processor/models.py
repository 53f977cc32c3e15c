from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProcessorResult:
    """What a successful parse run produced."""

    extraction_id: str
    detected_type: str
    warnings: list[str] = field(default_factory=list)

    def to_job_result(self) -> dict[str, object]:
        return {"extractionId": self.extraction_id, "warnings": list(self.warnings)}
