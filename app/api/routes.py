from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends

from app.api.dependencies import get_container, require_dispatcher_secret
from app.api.schemas import (
    AskRequest,
    AskResponse,
    DeleteRequest,
    DeleteResponse,
    DispatchResponse,
    DocumentStatusResponse,
    ExtractionResponse,
    JobAdmissionResponse,
    JobView,
    UploadTokenRequest,
    UploadTokenResponse,
)
from app.container import Container

router = APIRouter()


@router.post("/upload/token", response_model=UploadTokenResponse)
def issue_upload_token(
    body: UploadTokenRequest,
    container: Container = Depends(get_container),
) -> UploadTokenResponse:
    """Create a queued document and a signed URL to PUT its bytes to."""
    ticket = container.upload.issue(body.filename, body.mime, body.size)
    return UploadTokenResponse(
        document_id=ticket.document_id,
        session_id=ticket.session_id,
        upload_url=ticket.upload_url,
        token=ticket.token,
        path=ticket.path,
        expires_at=ticket.expires_at,
    )


@router.post(
    "/documents/{document_id}/job",
    response_model=JobAdmissionResponse,
    response_model_exclude_none=True,
)
def admit_job(
    document_id: UUID,
    background_tasks: BackgroundTasks,
    container: Container = Depends(get_container),
) -> JobAdmissionResponse:
    """Queue the parse job for an uploaded document. Idempotent."""
    job, created = container.admission.admit(str(document_id))
    if not created:
        return JobAdmissionResponse(
            message="Job already exists", job_id=job.id, status=job.status
        )

    if container.trigger.enabled:
        background_tasks.add_task(container.trigger.notify)
    return JobAdmissionResponse(job_id=job.id, status=job.status, created_at=job.created_at)


@router.get("/documents/{document_id}/status", response_model=DocumentStatusResponse)
def get_status(
    document_id: UUID,
    container: Container = Depends(get_container),
) -> DocumentStatusResponse:
    view = container.status.get_status(str(document_id))
    document, job = view.document, view.job
    return DocumentStatusResponse(
        id=document.id,
        filename=document.filename,
        status=document.status,
        detected_type=document.detected_type,
        created_at=document.created_at,
        expires_at=document.expires_at,
        job=None
        if job is None
        else JobView(
            id=job.id,
            status=job.status,
            error=job.error,
            error_kind=job.error_kind,
            created_at=job.created_at,
            updated_at=job.updated_at,
        ),
    )


@router.get("/documents/{document_id}/extraction", response_model=ExtractionResponse)
def get_extraction(
    document_id: UUID,
    container: Container = Depends(get_container),
) -> ExtractionResponse:
    extraction = container.status.get_extraction(str(document_id))
    return ExtractionResponse(
        id=extraction.id,
        provider=extraction.provider,
        confidence=extraction.confidence_overall,
        fields=extraction.fields,
        insights=extraction.insights,
        warnings=extraction.warnings,
        created_at=extraction.created_at,
    )


@router.delete("/documents/{document_id}", response_model=DeleteResponse)
def delete_document(
    document_id: UUID,
    body: DeleteRequest,
    container: Container = Depends(get_container),
) -> DeleteResponse:
    container.deletion.delete(str(document_id), body.session_id)
    return DeleteResponse()


@router.post("/documents/{document_id}/ask", response_model=AskResponse)
def ask_question(
    document_id: UUID,
    body: AskRequest,
    container: Container = Depends(get_container),
) -> AskResponse:
    result = container.qa.ask(
        str(document_id),
        body.question,
        [turn.model_dump() for turn in body.conversation_history],
    )
    return AskResponse(answer=result.answer, conversation_history=result.conversation_history)


@router.api_route(
    "/internal/dispatch",
    methods=["GET", "POST"],
    response_model=DispatchResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_dispatcher_secret)],
)
def dispatch(container: Container = Depends(get_container)) -> DispatchResponse:
    """Run one dispatcher cycle. Called by an external scheduler."""
    report = container.dispatcher.run_cycle()
    return DispatchResponse.model_validate(report.to_payload())
