from typing import Any

from psycopg.rows import dict_row

from app.database.connection import Database
from app.database.models import DocumentRecord, DocumentStatus
from app.processor.exceptions import DocumentNotFoundError

_COLUMNS = """
    id, session_id, filename, mime, size_bytes, storage_path, status,
    detected_type, created_at, expires_at, updated_at
"""


class DocumentRepository:
    """Database operations for the documents table."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def create(
        self,
        *,
        session_id: str,
        filename: str,
        mime: str,
        size_bytes: int,
        ttl_days: int,
    ) -> DocumentRecord:
        """Insert a queued document with an empty storage path."""
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO documents
                        (session_id, filename, mime, size_bytes, storage_path,
                         status, expires_at)
                    VALUES (%s, %s, %s, %s, '', %s, NOW() + make_interval(days => %s::int))
                    RETURNING {_COLUMNS}
                    """,
                    (
                        session_id,
                        filename,
                        mime,
                        size_bytes,
                        DocumentStatus.QUEUED.value,
                        ttl_days,
                    ),
                )
                row = cur.fetchone()
            conn.commit()

        assert row is not None
        return _to_record(row)

    def set_storage_path(self, document_id: str, storage_path: str) -> None:
        """Record where the document's bytes live in the blob store.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """
        with self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE documents
                    SET storage_path = %s, updated_at = NOW()
                    WHERE id = %s
                    """,
                    (storage_path, document_id),
                )
                if cur.rowcount == 0:
                    raise DocumentNotFoundError(f"Document {document_id} not found")
            conn.commit()

    def find_by_id(self, document_id: str) -> DocumentRecord | None:
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM documents WHERE id = %s",
                    (document_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return _to_record(row)

    def mark_succeeded(self, document_id: str, detected_type: str) -> None:
        """Flip a document to succeeded and store its detected type.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """
        with self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE documents
                    SET status = %s, detected_type = %s, updated_at = NOW()
                    WHERE id = %s
                    """,
                    (DocumentStatus.SUCCEEDED.value, detected_type, document_id),
                )
                if cur.rowcount == 0:
                    raise DocumentNotFoundError(f"Document {document_id} not found")
            conn.commit()

    def reset_status(self, document_id: str) -> None:
        """Return a document to queued and clear its detected type.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """
        with self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE documents
                    SET status = %s, detected_type = NULL, updated_at = NOW()
                    WHERE id = %s
                    """,
                    (DocumentStatus.QUEUED.value, document_id),
                )
                if cur.rowcount == 0:
                    raise DocumentNotFoundError(f"Document {document_id} not found")
            conn.commit()

    def delete(self, document_id: str) -> bool:
        """Delete a document row. Returns False if it did not exist."""
        with self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM documents WHERE id = %s", (document_id,))
                deleted = cur.rowcount > 0
            conn.commit()
        return deleted


def _to_record(row: dict[str, Any]) -> DocumentRecord:
    return DocumentRecord(
        id=str(row["id"]),
        session_id=row["session_id"],
        filename=row["filename"],
        mime=row["mime"],
        size_bytes=row["size_bytes"],
        storage_path=row["storage_path"],
        status=row["status"],
        detected_type=row["detected_type"],
        created_at=row["created_at"],
        expires_at=row["expires_at"],
        updated_at=row["updated_at"],
    )
