import json
from dataclasses import dataclass, field

from app.database.repositories.document_repository import DocumentRepository
from app.database.repositories.extraction_repository import ExtractionRepository
from app.exceptions import ValidationError
from app.extraction.base import BaseExtractor
from app.logging.logger import Log
from app.processor.exceptions import DocumentNotFoundError, ExtractionNotFoundError

FALLBACK_ANSWER = "I couldn't generate an answer."

SYSTEM_PROMPT = """You are a helpful assistant answering questions about a document. Here is the extracted information from the document:

Document Type: {document_type}
Filename: {filename}

Extracted Data:
{extraction}

Answer questions based on this information. Be concise, accurate, and helpful. If the information isn't in the extraction, say so clearly."""

ALLOWED_ROLES = frozenset({"user", "assistant"})


@dataclass(frozen=True)
class Answer:
    answer: str
    conversation_history: list[dict[str, str]] = field(default_factory=list)


class QuestionService:
    """Answers follow-up questions grounded in a document's stored extraction."""

    def __init__(
        self,
        doc_repo: DocumentRepository,
        extraction_repo: ExtractionRepository,
        extractor: BaseExtractor,
    ) -> None:
        self._doc_repo = doc_repo
        self._extraction_repo = extraction_repo
        self._extractor = extractor

    def ask(
        self,
        document_id: str,
        question: str,
        history: list[dict[str, str]] | None = None,
    ) -> Answer:
        question = (question or "").strip()
        if not question:
            raise ValidationError("Question is required")

        document = self._doc_repo.find_by_id(document_id)
        if document is None:
            raise DocumentNotFoundError("Document not found")
        extraction = self._extraction_repo.find_latest_for_document(document_id)
        if extraction is None:
            raise ExtractionNotFoundError("Extraction data not found")

        turns = [turn for turn in history or [] if turn.get("role") in ALLOWED_ROLES]
        messages = [
            {
                "role": "system",
                "content": SYSTEM_PROMPT.format(
                    document_type=document.detected_type or "Unknown",
                    filename=document.filename,
                    extraction=json.dumps(extraction.fields, indent=2),
                ),
            },
            *({"role": turn["role"], "content": turn.get("content", "")} for turn in turns),
            {"role": "user", "content": question},
        ]
        Log.debug(f"Answering question for document {document_id} with {len(turns)} prior turn(s)")

        answer = self._extractor.answer(messages).strip() or FALLBACK_ANSWER
        return Answer(
            answer=answer,
            conversation_history=[
                *turns,
                {"role": "user", "content": question},
                {"role": "assistant", "content": answer},
            ],
        )
