from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Wire models: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UploadTokenRequest(CamelModel):
    filename: str
    mime: str
    size: int


class UploadTokenResponse(CamelModel):
    document_id: str
    session_id: str
    upload_url: str
    token: str
    path: str
    expires_at: datetime


class JobAdmissionResponse(CamelModel):
    message: str | None = None
    job_id: str
    status: str
    created_at: datetime | None = None


class JobView(CamelModel):
    id: str
    status: str
    error: str | None = None
    error_kind: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DocumentStatusResponse(CamelModel):
    id: str
    filename: str
    status: str
    detected_type: str | None = None
    created_at: datetime | None = None
    expires_at: datetime | None = None
    job: JobView | None = None


class ExtractionResponse(CamelModel):
    id: str
    provider: str
    confidence: float | None = None
    fields: dict[str, Any]
    insights: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    created_at: datetime | None = None


class DeleteRequest(BaseModel):
    session_id: str = Field(min_length=1)


class DeleteResponse(BaseModel):
    success: bool = True


class ChatTurn(BaseModel):
    role: str
    content: str


class AskRequest(CamelModel):
    question: str = ""
    conversation_history: list[ChatTurn] = Field(default_factory=list)


class AskResponse(CamelModel):
    answer: str
    conversation_history: list[ChatTurn]


class DispatchResult(CamelModel):
    job_id: str
    status: str
    error: str | None = None


class DispatchResponse(CamelModel):
    processed: int
    results: list[DispatchResult]
