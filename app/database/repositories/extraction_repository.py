from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from app.database.connection import Database
from app.database.models import ExtractionRecord

_COLUMNS = """
    id, document_id, provider, confidence_overall, fields, insights, warnings,
    created_at
"""


class ExtractionRepository:
    """Database operations for the append-only extractions table."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def create(
        self,
        *,
        document_id: str,
        provider: str,
        fields: dict[str, Any],
        insights: dict[str, Any],
        warnings: list[str],
        confidence_overall: float | None = None,
    ) -> ExtractionRecord:
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO extractions
                        (document_id, provider, confidence_overall, fields,
                         insights, warnings)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    RETURNING {_COLUMNS}
                    """,
                    (
                        document_id,
                        provider,
                        confidence_overall,
                        Jsonb(fields),
                        Jsonb(insights),
                        Jsonb(warnings),
                    ),
                )
                row = cur.fetchone()
            conn.commit()

        assert row is not None
        return _to_record(row)

    def find_latest_for_document(self, document_id: str) -> ExtractionRecord | None:
        """Most recent extraction wins when a retried job wrote more than one."""
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM extractions
                    WHERE document_id = %s
                    ORDER BY created_at DESC
                    LIMIT 1
                    """,
                    (document_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return _to_record(row)

    def delete_for_document(self, document_id: str) -> int:
        with self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM extractions WHERE document_id = %s", (document_id,)
                )
                deleted = cur.rowcount
            conn.commit()
        return deleted


def _to_record(row: dict[str, Any]) -> ExtractionRecord:
    return ExtractionRecord(
        id=str(row["id"]),
        document_id=str(row["document_id"]),
        provider=row["provider"],
        confidence_overall=row["confidence_overall"],
        fields=row["fields"],
        insights=row["insights"],
        warnings=row["warnings"],
        created_at=row["created_at"],
    )
