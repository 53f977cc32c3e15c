from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class DocumentStatus(str, Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class JobStatus(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"


class JobKind(str, Enum):
    """Known job kinds. Persisted as plain text so new kinds need no migration."""

    PARSE = "parse"


TERMINAL_JOB_STATUSES = frozenset({JobStatus.DONE.value, JobStatus.ERROR.value})


@dataclass
class DocumentRecord:
    """Represents a row from the documents table."""

    id: str
    session_id: str
    filename: str
    mime: str
    size_bytes: int
    storage_path: str
    status: str
    detected_type: str | None = None
    created_at: datetime | None = None
    expires_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class JobRecord:
    """Represents a row from the jobs table."""

    id: str
    document_id: str
    kind: str
    status: str
    attempts: int = 0
    error: str | None = None
    error_kind: str | None = None
    result: dict[str, Any] | None = None
    locked_at: datetime | None = None
    available_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_JOB_STATUSES


@dataclass
class ExtractionRecord:
    """Represents a row from the extractions table."""

    id: str
    document_id: str
    provider: str
    fields: dict[str, Any]
    insights: dict[str, Any] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    confidence_overall: float | None = None
    created_at: datetime | None = None


@dataclass
class AuditLogEntry:
    """An append-only audit_logs row."""

    action: str
    entity: str
    entity_id: str | None = None
    user_identifier: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
